"""Summary statistics over validated listing items."""

from collections import Counter
from dataclasses import astuple
from typing import Any, get_args

from listing_analyzer.models import (
    PRICE_BUCKETS,
    AnalysisResult,
    AnalysisSummary,
    ExtractedItem,
    ListingType,
)

TOP_ITEMS_LIMIT = 10

LISTING_TYPES: tuple[str, ...] = get_args(ListingType)


def sort_key(item: ExtractedItem) -> tuple[Any, ...]:
    """Order: priced items by price descending, then unpriced; ties by title.

    Titles compare case-insensitively first, so "apple" sorts before "Banana".
    Remaining fields break any further tie so that distinct items never
    compare equal.
    """
    if item.price > 0:
        return (0, -item.price, item.title.casefold(), item.title, *astuple(item))
    return (1, 0.0, item.title.casefold(), item.title, *astuple(item))


def sort_items(items: list[ExtractedItem]) -> list[ExtractedItem]:
    return sorted(items, key=sort_key)


def price_bucket(price: float) -> str | None:
    """Label of the bucket holding a resolved price.

    Args:
        price: Item price.

    Returns:
        Bucket label, or None for unresolved (non-positive) prices.
    """
    if price <= 0:
        return None
    for label, low, high in PRICE_BUCKETS:
        if price >= low and (high is None or price < high):
            return label
    return None


def count_price_buckets(items: list[ExtractedItem]) -> dict[str, int]:
    """Count priced items per bucket; every label is present, in order."""
    counts = {label: 0 for label, _, _ in PRICE_BUCKETS}
    for item in items:
        label = price_bucket(item.price)
        if label is not None:
            counts[label] += 1
    return counts


def count_types(items: list[ExtractedItem]) -> dict[str, int]:
    """Count items per listing type; only observed types, in type order."""
    counts = Counter(item.type for item in items)
    return {listing_type: counts[listing_type] for listing_type in LISTING_TYPES if counts[listing_type]}


def aggregate(items: list[ExtractedItem], top_n: int = TOP_ITEMS_LIMIT) -> AnalysisResult:
    """Sort items and compute their summary.

    Args:
        items: Validated items in any order.
        top_n: Number of top items to keep in the summary.

    Returns:
        AnalysisResult with items in report order.
    """
    ordered = sort_items(items)
    priced = [item for item in ordered if item.price > 0]

    total_revenue = sum(item.price for item in priced)
    average_price = total_revenue / len(priced) if priced else 0

    summary = AnalysisSummary(
        total_items=len(ordered),
        items_with_prices=len(priced),
        total_revenue=total_revenue,
        average_price=average_price,
        price_buckets=count_price_buckets(priced),
        type_counts=count_types(ordered),
        top_items=ordered[:top_n],
    )
    return AnalysisResult(items=ordered, summary=summary)
