"""Next-page detection and navigation for listing result pages."""

import logging

from playwright.async_api import ElementHandle, Page

logger = logging.getLogger(__name__)


class Paginator:
    """Finds and follows the 'next page' control."""

    NEXT_PAGE_SELECTORS = [
        'a[aria-label="Next"]',
        ".pagination-next",
        ".tm-pagination-next",
        '[data-testid="next-page"]',
    ]

    async def _find_next_control(self, page: Page) -> ElementHandle | None:
        for selector in self.NEXT_PAGE_SELECTORS:
            element = await page.query_selector(selector)
            if element and not await self._is_disabled(element):
                return element
        return None

    async def _is_disabled(self, element: ElementHandle) -> bool:
        if await element.get_attribute("disabled") is not None:
            return True
        if await element.get_attribute("aria-disabled") == "true":
            return True
        classes = await element.get_attribute("class") or ""
        return "disabled" in classes.split()

    async def has_next_page(self, page: Page) -> bool:
        """Check if there's an enabled next-page control."""
        return await self._find_next_control(page) is not None

    async def go_to_next_page(self, page: Page) -> bool:
        """Click the next-page control.

        Args:
            page: Playwright page instance.

        Returns:
            True if a control was clicked.
        """
        next_button = await self._find_next_control(page)
        if next_button is None:
            return False

        await next_button.click()
        await page.wait_for_load_state("domcontentloaded")
        logger.info("Navigated to next results page")
        return True
