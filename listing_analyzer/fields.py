"""Per-field heuristics for listing candidate nodes.

Every async extractor takes a Playwright element handle and returns a
best-effort value. Extractors never raise: failures are logged and the
field's neutral value is returned instead.
"""

import functools
import logging
import re
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, TypeVar
from urllib.parse import urljoin, urlparse

from playwright.async_api import ElementHandle

from listing_analyzer.models import UNKNOWN_TITLE, ExtractionSettings, ListingType

logger = logging.getLogger(__name__)

T = TypeVar("T")

LINK_SELECTOR = "a[href]"
HEADING_SELECTOR = "h1, h2, h3, h4, h5, h6"
IMAGE_SELECTOR = "img"

TITLE_SELECTORS = [
    ".listing-title",
    ".tm-listing-title",
    '[data-testid="listing-title"]',
    ".o-card__heading",
    '[class*="title"]',
]

SELLER_SELECTOR = '.seller, .tm-seller, [data-testid="seller"], .listing-seller, .member-name'

# Ordered: a zero or out-of-range plain amount falls through to labelled ones
PRICE_PATTERNS = [
    re.compile(r"\$\s?(\d[\d,]*(?:\.\d{1,2})?)"),
    re.compile(r"Reserve:?\s*\$\s?(\d[\d,]*(?:\.\d{1,2})?)", re.IGNORECASE),
    re.compile(r"Buy Now:?\s*\$\s?(\d[\d,]*(?:\.\d{1,2})?)", re.IGNORECASE),
]

PRICE_TEXT_PATTERN = re.compile(r"\$\s?\d[\d,]*(?:\.\d{2})?|Reserve|Buy Now|Auction")

CURRENCY_SYMBOL_PATTERN = re.compile(r"[$£€]")

KNOWN_LOCATIONS = [
    "Auckland",
    "Wellington",
    "Christchurch",
    "Hamilton",
    "Tauranga",
    "Dunedin",
    "Palmerston North",
    "Nelson",
    "Rotorua",
    "New Plymouth",
]

LOCATION_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(name) for name in KNOWN_LOCATIONS) + r")\b",
    re.IGNORECASE,
)

_CANONICAL_LOCATIONS = {name.lower(): name for name in KNOWN_LOCATIONS}

TEXT_NODES_SCRIPT = """
(node) => {
    const texts = [];
    const walker = document.createTreeWalker(node, NodeFilter.SHOW_TEXT);
    while (walker.nextNode()) {
        const text = walker.currentNode.textContent.trim();
        if (text) texts.push(text);
    }
    return texts;
}
"""


def recover(default: T) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Return ``default`` instead of raising when an extractor fails.

    Args:
        default: Neutral value for the field.

    Returns:
        Decorator for async extractor functions.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.warning(f"Field extractor {func.__name__} failed: {e}")
                return default

        return wrapper

    return decorator


async def node_text(element: ElementHandle | None) -> str:
    """Rendered text of an element, stripped."""
    if element is None:
        return ""
    return (await element.inner_text() or "").strip()


def resolve_url(url: str, base_url: str = "") -> str:
    """Resolve a possibly relative URL against the site origin.

    Args:
        url: Raw href/src attribute value.
        base_url: Site origin or page URL.

    Returns:
        Absolute http(s) URL, or empty string if it cannot be resolved.
    """
    url = url.strip()
    if not url:
        return ""

    resolved = urljoin(base_url, url) if base_url else url
    if urlparse(resolved).scheme not in ("http", "https"):
        return ""
    return resolved


def parse_price(text: str, max_price: float = ExtractionSettings.max_price) -> float:
    """Parse the first plausible currency amount from text.

    Args:
        text: Full text of a candidate node.
        max_price: Exclusive upper bound for an accepted amount.

    Returns:
        Price as float, or 0.0 if no pattern yields a value in (0, max_price).
    """
    for pattern in PRICE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        try:
            amount = float(match.group(1).replace(",", ""))
        except ValueError:
            continue
        if 0 < amount < max_price:
            return amount
    return 0.0


def find_price_text(text: str) -> str:
    """First literal currency amount or listing marker in text."""
    match = PRICE_TEXT_PATTERN.search(text)
    return match.group(0) if match else ""


def find_location(text: str) -> str:
    """First known city name mentioned in text."""
    match = LOCATION_PATTERN.search(text)
    if not match:
        return ""
    return _CANONICAL_LOCATIONS[match.group(1).lower()]


def classify_listing_type(text: str) -> ListingType:
    """Classify listing type by keyword, first match wins.

    Args:
        text: Full text of a candidate node.

    Returns:
        'Auction', 'Buy Now', 'Reserve', or 'Listing'.
    """
    lowered = text.lower()
    if "auction" in lowered:
        return "Auction"
    if "buy now" in lowered or "buy it now" in lowered:
        return "Buy Now"
    if "reserve" in lowered:
        return "Reserve"
    return "Listing"


async def _title_candidates(element: ElementHandle, settings: ExtractionSettings) -> AsyncIterator[str]:
    """Yield title candidates in fallback order, querying lazily."""
    link = await element.query_selector(LINK_SELECTOR)
    if link:
        yield await node_text(link)
        yield (await link.get_attribute("title") or "").strip()

    heading = await element.query_selector(HEADING_SELECTOR)
    if heading:
        yield await node_text(heading)

    for selector in TITLE_SELECTORS:
        marked = await element.query_selector(selector)
        if marked:
            yield await node_text(marked)

    yield await _longest_text_node(element, settings)


async def _longest_text_node(element: ElementHandle, settings: ExtractionSettings) -> str:
    texts = await element.evaluate(TEXT_NODES_SCRIPT) or []
    eligible = [
        text
        for text in texts
        if settings.min_fallback_title_length <= len(text) <= settings.max_title_length
        and not CURRENCY_SYMBOL_PATTERN.search(text)
    ]
    if not eligible:
        return ""
    return max(eligible, key=len)


@recover(UNKNOWN_TITLE)
async def extract_title(element: ElementHandle, settings: ExtractionSettings | None = None) -> str:
    """Extract listing title.

    Tries the first link (text, then title attribute), the first heading,
    known title markers, then the longest price-free text node.

    Args:
        element: Candidate node.
        settings: Length thresholds.

    Returns:
        First candidate with an acceptable length, else ``UNKNOWN_TITLE``.
    """
    settings = settings or ExtractionSettings()
    async for candidate in _title_candidates(element, settings):
        if settings.min_title_length < len(candidate) < settings.max_title_length:
            return candidate
    return UNKNOWN_TITLE


@recover(0.0)
async def extract_price(element: ElementHandle, settings: ExtractionSettings | None = None) -> float:
    settings = settings or ExtractionSettings()
    return parse_price(await node_text(element), settings.max_price)


@recover("")
async def extract_price_text(element: ElementHandle) -> str:
    return find_price_text(await node_text(element))


@recover("")
async def extract_link(element: ElementHandle, base_url: str = "") -> str:
    """Extract the first link as an absolute URL."""
    link = await element.query_selector(LINK_SELECTOR)
    if not link:
        return ""
    return resolve_url(await link.get_attribute("href") or "", base_url)


@recover("")
async def extract_image(element: ElementHandle, base_url: str = "") -> str:
    """Extract the first image source (falls back to lazy-load ``data-src``)."""
    image = await element.query_selector(IMAGE_SELECTOR)
    if not image:
        return ""
    src = await image.get_attribute("src") or await image.get_attribute("data-src") or ""
    return resolve_url(src, base_url)


@recover("")
async def extract_location(element: ElementHandle) -> str:
    return find_location(await node_text(element))


@recover("")
async def extract_seller(element: ElementHandle) -> str:
    return await node_text(await element.query_selector(SELLER_SELECTOR))


@recover("Listing")
async def extract_type(element: ElementHandle) -> ListingType:
    return classify_listing_type(await node_text(element))
