"""Base class and cascade for listing candidate locators."""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from playwright.async_api import ElementHandle, Page

from listing_analyzer.context import collect_page_context
from listing_analyzer.errors import NoListingsFoundError
from listing_analyzer.models import ExtractionSettings

logger = logging.getLogger(__name__)

CURRENCY_PATTERN = re.compile(r"\$[\d,]+")
LISTING_MARKERS = ("Reserve", "Buy Now")
TITLE_DESCENDANT_SELECTOR = "a[href], h1, h2, h3, h4, h5, h6"


@dataclass
class LocatedCandidates:
    """Validated candidates, the strategy that produced them, and raw counts per strategy tried."""

    strategy: str
    elements: list[ElementHandle] = field(default_factory=list)
    strategy_counts: dict[str, int] = field(default_factory=dict)


async def is_listing_candidate(element: ElementHandle, settings: ExtractionSettings | None = None) -> bool:
    """Check whether a node plausibly holds one listing.

    A candidate must be rendered, carry more than ``min_text_length`` characters
    of text with a currency amount or a Reserve/Buy Now marker, and contain a
    link or heading.

    Args:
        element: Node to check.
        settings: Thresholds.

    Returns:
        True if the node passes every check.
    """
    settings = settings or ExtractionSettings()
    try:
        box = await element.bounding_box()
        if not box or box["width"] <= 0 or box["height"] <= 0:
            return False

        text = (await element.inner_text() or "").strip()
        if len(text) <= settings.min_text_length:
            return False

        if not CURRENCY_PATTERN.search(text) and not any(marker in text for marker in LISTING_MARKERS):
            return False

        return await element.query_selector(TITLE_DESCENDANT_SELECTOR) is not None

    except Exception as e:
        logger.debug(f"Candidate check failed: {e}")
        return False


class LocatorStrategy(ABC):
    """One way of querying the page for listing nodes."""

    NAME: str = ""

    @abstractmethod
    async def locate(self, page: Page, cap: int) -> list[ElementHandle]:
        """Query the page for raw (unvalidated) listing nodes.

        Args:
            page: Playwright page instance.
            cap: Upper bound on nodes the caller will use.

        Returns:
            Nodes in document order.
        """
        ...


class CandidateLocator:
    """Tries strategies in priority order; first validated result wins."""

    def __init__(
        self,
        strategies: list[LocatorStrategy],
        settings: ExtractionSettings | None = None,
        domain: str = "",
    ):
        """Initialize with strategies in priority order.

        Args:
            strategies: Locator strategies, highest priority first.
            settings: Thresholds for candidate validation.
            domain: Marketplace host fragment for failure diagnostics.
        """
        self.strategies = strategies
        self.settings = settings or ExtractionSettings()
        self.domain = domain

    async def locate(self, page: Page, max_items: int) -> LocatedCandidates:
        """Locate validated listing candidates.

        Args:
            page: Playwright page instance.
            max_items: Number of items the caller wants.

        Returns:
            Candidates from the first strategy with any validated node.

        Raises:
            NoListingsFoundError: If no strategy yields a validated node.
        """
        cap = max(max_items, self.settings.candidate_cap)
        strategy_counts: dict[str, int] = {}

        for strategy in self.strategies:
            try:
                raw = await strategy.locate(page, cap)
            except Exception as e:
                logger.warning(f"Locator strategy {strategy.NAME} failed: {e}")
                raw = []

            strategy_counts[strategy.NAME] = len(raw)

            validated: list[ElementHandle] = []
            for element in raw:
                if await is_listing_candidate(element, self.settings):
                    validated.append(element)
                    if len(validated) >= cap:
                        break

            if validated:
                logger.info(f"Located {len(validated)} candidates using {strategy.NAME} ({len(raw)} raw)")
                return LocatedCandidates(
                    strategy=strategy.NAME,
                    elements=validated,
                    strategy_counts=strategy_counts,
                )

            logger.debug(f"Strategy {strategy.NAME} yielded no valid candidates ({len(raw)} raw)")

        context = await collect_page_context(page, self.domain, strategy_counts)
        raise NoListingsFoundError(context)
