"""Build and validate item records from candidate nodes."""

import logging
from datetime import datetime

from playwright.async_api import ElementHandle

from listing_analyzer.fields import (
    extract_image,
    extract_link,
    extract_location,
    extract_price,
    extract_price_text,
    extract_seller,
    extract_title,
    extract_type,
)
from listing_analyzer.models import UNKNOWN_TITLE, ExtractedItem, ExtractionSettings

logger = logging.getLogger(__name__)


async def build_item(
    element: ElementHandle,
    rank: int,
    base_url: str = "",
    settings: ExtractionSettings | None = None,
) -> ExtractedItem | None:
    """Run every field extractor over one candidate.

    Args:
        element: Candidate node.
        rank: 1-based position in the candidate sequence.
        base_url: Origin for resolving relative links.
        settings: Heuristic thresholds.

    Returns:
        ExtractedItem, or None if the record could not be built.
    """
    try:
        return ExtractedItem(
            rank=rank,
            title=await extract_title(element, settings),
            price=await extract_price(element, settings),
            price_text=await extract_price_text(element),
            link=await extract_link(element, base_url),
            image=await extract_image(element, base_url),
            location=await extract_location(element),
            seller=await extract_seller(element),
            type=await extract_type(element),
            extracted_at=datetime.now().isoformat(),
        )
    except Exception as e:
        logger.warning(f"Error building item {rank}: {e}")
        return None


async def build_items(
    elements: list[ElementHandle],
    start_rank: int = 1,
    base_url: str = "",
    settings: ExtractionSettings | None = None,
) -> list[ExtractedItem]:
    """Build raw items for a batch of candidates, skipping failures.

    Args:
        elements: Candidate nodes in locator order.
        start_rank: Rank assigned to the first candidate.
        base_url: Origin for resolving relative links.
        settings: Heuristic thresholds.

    Returns:
        Items that could be built, in candidate order.
    """
    items = []
    for offset, element in enumerate(elements):
        item = await build_item(element, start_rank + offset, base_url, settings)
        if item is not None:
            items.append(item)
    return items


def is_valid_item(item: ExtractedItem) -> bool:
    """Check the minimum fields: a real title and some price signal."""
    if not item.title or item.title == UNKNOWN_TITLE:
        return False
    return item.price > 0 or bool(item.price_text)


def filter_items(items: list[ExtractedItem]) -> list[ExtractedItem]:
    """Drop items failing validation, preserving order."""
    valid = [item for item in items if is_valid_item(item)]
    if len(valid) < len(items):
        logger.debug(f"Dropped {len(items) - len(valid)} invalid items")
    return valid
