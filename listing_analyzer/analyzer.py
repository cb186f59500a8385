"""Listing analysis engine: locate, build, validate, aggregate."""

import logging
from dataclasses import asdict

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeout

from listing_analyzer.aggregator import aggregate
from listing_analyzer.builder import build_items, filter_items
from listing_analyzer.errors import NoListingsFoundError
from listing_analyzer.locator import CandidateLocator, default_strategies
from listing_analyzer.models import AnalysisResult, ExtractedItem, ExtractionSettings
from listing_analyzer.pagination import Paginator
from listing_analyzer.progress import ProgressReporter

logger = logging.getLogger(__name__)


class ListingAnalyzer:
    """Extracts listings from a rendered page and summarizes them.

    The analyzer holds no run state between calls; callers are responsible
    for not starting overlapping runs against the same page.
    """

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        base_url: str = "",
        domain: str = "",
        locator: CandidateLocator | None = None,
        paginator: Paginator | None = None,
        reporter: ProgressReporter | None = None,
    ):
        """Initialize analyzer components.

        Args:
            settings: Heuristic thresholds and loop bounds.
            base_url: Site origin for resolving relative links. Defaults to the page URL.
            domain: Marketplace host fragment for diagnostics.
            locator: Candidate locator. Defaults to the standard strategy cascade.
            paginator: Next-page collaborator.
            reporter: Progress observer.
        """
        self.settings = settings or ExtractionSettings()
        self.base_url = base_url
        self.locator = locator or CandidateLocator(default_strategies(self.settings), self.settings, domain)
        self.paginator = paginator or Paginator()
        self.reporter = reporter or ProgressReporter()

    async def analyze(self, page: Page, max_items: int, category: str = "all") -> AnalysisResult:
        """Run a full analysis on the current page.

        Args:
            page: Playwright page already navigated to a results page.
            max_items: Upper bound on items retrieved.
            category: Category hint; recorded but not used for extraction.

        Returns:
            AnalysisResult over all validated items.

        Raises:
            ValueError: If max_items is not positive.
            NoListingsFoundError: If the first page has no listing candidates.
        """
        if max_items < 1:
            raise ValueError(f"max_items must be positive, got {max_items}")

        logger.info(f"Starting listing analysis of {page.url} (category={category}, max_items={max_items})")
        await self.reporter.progress(10, "Scanning page structure...")

        try:
            items = await self._collect_items(page, max_items)
        except NoListingsFoundError as e:
            logger.error(str(e))
            await self.reporter.error(str(e), asdict(e.context))
            raise

        await self.reporter.progress(80, "Processing item data...")
        result = aggregate(items)

        await self.reporter.progress(100, "Analysis complete!")
        await self.reporter.complete(result)

        logger.info(
            f"Analysis complete: {result.summary.total_items} items, "
            f"{result.summary.items_with_prices} with prices"
        )
        return result

    async def _wait_for_render(self, page: Page) -> None:
        """Wait (bounded) for the initial render, then settle."""
        try:
            await page.wait_for_load_state("domcontentloaded", timeout=self.settings.render_timeout_ms)
        except PlaywrightTimeout:
            logger.warning("Page did not finish loading in time, scanning anyway")
        await page.wait_for_timeout(self.settings.settle_delay_ms)

    async def _collect_items(self, page: Page, max_items: int) -> list[ExtractedItem]:
        """Gather validated items, following pagination while short of max_items."""
        await self._wait_for_render(page)

        items: list[ExtractedItem] = []
        candidates_seen = 0
        page_number = 1

        while True:
            await self.reporter.progress(
                20 + (len(items) / max_items) * 50,
                f"Extracting items... ({len(items)}/{max_items})",
            )

            try:
                located = await self.locator.locate(page, max_items)
            except NoListingsFoundError:
                if page_number == 1:
                    raise
                logger.info(f"No listings on page {page_number}, stopping")
                break

            # Validate the whole batch before cutting to max_items
            raw_items = await build_items(
                located.elements,
                start_rank=candidates_seen + 1,
                base_url=self.base_url or page.url,
                settings=self.settings,
            )
            candidates_seen += len(located.elements)

            valid = filter_items(raw_items)
            items.extend(valid[: max_items - len(items)])
            logger.info(
                f"Page {page_number}: {len(valid)}/{len(located.elements)} candidates valid via {located.strategy}"
            )

            if len(items) >= max_items or page_number >= self.settings.max_pages:
                break
            if not await self.paginator.has_next_page(page):
                break

            if not await self.paginator.go_to_next_page(page):
                break
            await page.wait_for_timeout(self.settings.settle_delay_ms)
            page_number += 1

        return items[:max_items]
