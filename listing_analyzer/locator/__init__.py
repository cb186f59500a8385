"""Cascading locators for listing candidate nodes."""

from listing_analyzer.locator.base import (
    CandidateLocator,
    LocatedCandidates,
    LocatorStrategy,
    is_listing_candidate,
)
from listing_analyzer.locator.strategies import (
    AttributeMarkerStrategy,
    ClassNameStrategy,
    ContentHeuristicStrategy,
    StructuralStrategy,
    default_strategies,
)

__all__ = [
    "CandidateLocator",
    "LocatedCandidates",
    "LocatorStrategy",
    "is_listing_candidate",
    "AttributeMarkerStrategy",
    "ClassNameStrategy",
    "StructuralStrategy",
    "ContentHeuristicStrategy",
    "default_strategies",
]
