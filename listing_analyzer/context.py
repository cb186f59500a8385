"""Page diagnostics for failed analysis runs."""

import logging
from urllib.parse import urlparse

from playwright.async_api import Page

from listing_analyzer.models import PageContext

logger = logging.getLogger(__name__)

ELEMENT_COUNTS_SCRIPT = """
() => ({
    all: document.querySelectorAll('*').length,
    links: document.querySelectorAll('a[href]').length,
    headings: document.querySelectorAll('h1, h2, h3, h4, h5, h6').length,
    articles: document.querySelectorAll('article').length,
    images: document.querySelectorAll('img').length,
})
"""


def classify_page_type(url: str, domain: str = "") -> str:
    """Classify a marketplace page from its URL.

    Args:
        url: Page URL.
        domain: Marketplace host fragment, e.g. 'trademe.co.nz'.

    Returns:
        One of 'external', 'listing', 'search', 'home', 'category'.
    """
    parsed = urlparse(url)
    if domain and domain not in parsed.netloc:
        return "external"

    path = parsed.path.lower()
    query = parsed.query.lower()

    if "/listing/" in path or "listingid=" in query:
        return "listing"
    if "search" in path or "search_string=" in query:
        return "search"
    if path in ("", "/"):
        return "home"
    return "category"


async def collect_page_context(
    page: Page,
    domain: str = "",
    strategy_counts: dict[str, int] | None = None,
) -> PageContext:
    """Gather page diagnostics. Never raises.

    Args:
        page: Playwright page instance.
        domain: Marketplace host fragment used for classification.
        strategy_counts: Raw node counts per locator strategy.

    Returns:
        PageContext with whatever could be collected.
    """
    url = page.url
    context = PageContext(
        url=url,
        page_type=classify_page_type(url, domain),
        strategy_counts=dict(strategy_counts or {}),
    )

    try:
        context.title = await page.title()
    except Exception as e:
        logger.debug(f"Could not read page title: {e}")

    try:
        counts = await page.evaluate(ELEMENT_COUNTS_SCRIPT)
        context.element_counts = {key: int(value) for key, value in (counts or {}).items()}
    except Exception as e:
        logger.debug(f"Could not count page elements: {e}")

    return context
