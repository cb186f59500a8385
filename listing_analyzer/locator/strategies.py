"""Concrete listing locator strategies, highest priority first."""

import logging

from playwright.async_api import ElementHandle, Page

from listing_analyzer.locator.base import LocatorStrategy
from listing_analyzer.models import ExtractionSettings

logger = logging.getLogger(__name__)


class AttributeMarkerStrategy(LocatorStrategy):
    """Nodes carrying a semantic listing/card data attribute."""

    NAME = "attribute_marker"

    SELECTOR = '[data-testid="listing"], [data-listing-id], [data-testid*="listing-card"], [data-testid*="card"]'

    async def locate(self, page: Page, cap: int) -> list[ElementHandle]:
        return await page.query_selector_all(self.SELECTOR)


class ClassNameStrategy(LocatorStrategy):
    """Nodes with a known listing class token."""

    NAME = "class_name"

    CLASS_TOKENS = [
        ".listing-item",
        ".tm-listing",
        ".supergrid-listing",
        ".o-card",
        ".tm-search-card",
    ]

    async def locate(self, page: Page, cap: int) -> list[ElementHandle]:
        return await page.query_selector_all(", ".join(self.CLASS_TOKENS))


class StructuralStrategy(LocatorStrategy):
    """Article elements and nodes whose class mentions listing/item/card."""

    NAME = "structural"

    SELECTOR = 'article, [class*="listing"], [class*="item"], [class*="card"]'

    async def locate(self, page: Page, cap: int) -> list[ElementHandle]:
        return await page.query_selector_all(self.SELECTOR)


class ContentHeuristicStrategy(LocatorStrategy):
    """Large visible nodes whose text looks like a listing.

    The scan runs in the page in one call and keeps only the innermost
    qualifying nodes, so wrappers such as ``body`` are not reported alongside
    the cards they contain.
    """

    NAME = "content_heuristic"

    SCAN_SCRIPT = """
    ({ minWidth, minHeight, limit }) => {
        const pattern = /\\$[\\d,]+|Reserve|Buy Now/;
        const matches = Array.from(document.querySelectorAll('body *')).filter(el => {
            const rect = el.getBoundingClientRect();
            if (rect.width < minWidth || rect.height < minHeight) return false;
            if (!pattern.test(el.innerText || '')) return false;
            return el.querySelector('a[href], h1, h2, h3, h4, h5, h6') !== null;
        });
        return matches
            .filter(el => !matches.some(other => other !== el && el.contains(other)))
            .slice(0, limit);
    }
    """

    def __init__(self, settings: ExtractionSettings | None = None):
        self.settings = settings or ExtractionSettings()

    async def locate(self, page: Page, cap: int) -> list[ElementHandle]:
        handle = await page.evaluate_handle(
            self.SCAN_SCRIPT,
            {
                "minWidth": self.settings.min_node_width,
                "minHeight": self.settings.min_node_height,
                "limit": cap,
            },
        )
        try:
            properties = await handle.get_properties()
            elements = []
            for prop in properties.values():
                element = prop.as_element()
                if element is not None:
                    elements.append(element)
            return elements
        finally:
            await handle.dispose()


def default_strategies(settings: ExtractionSettings | None = None) -> list[LocatorStrategy]:
    """Strategy cascade in priority order."""
    return [
        AttributeMarkerStrategy(),
        ClassNameStrategy(),
        StructuralStrategy(),
        ContentHeuristicStrategy(settings),
    ]
