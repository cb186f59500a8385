"""Data models for marketplace listing analysis."""

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

ListingType = Literal["Auction", "Buy Now", "Reserve", "Listing"]

UNKNOWN_TITLE = "Unknown Item"

# Half-open [low, high) ranges; None means unbounded above.
PRICE_BUCKETS: list[tuple[str, float, float | None]] = [
    ("Under $50", 0, 50),
    ("$50 - $200", 50, 200),
    ("$200 - $500", 200, 500),
    ("$500 - $1,000", 500, 1000),
    ("Over $1,000", 1000, None),
]


@dataclass(frozen=True)
class ExtractedItem:
    """One listing extracted from a candidate node."""

    rank: int
    title: str
    price: float = 0.0  # 0 when unresolved
    price_text: str = ""
    link: str = ""
    image: str = ""
    location: str = ""
    seller: str = ""
    type: ListingType = "Listing"
    extracted_at: str = ""  # ISO format


@dataclass(frozen=True)
class AnalysisSummary:
    """Aggregate statistics over validated items."""

    total_items: int
    items_with_prices: int
    total_revenue: float
    average_price: float
    price_buckets: dict[str, int]
    type_counts: dict[str, int]
    top_items: list[ExtractedItem] = field(default_factory=list)


@dataclass(frozen=True)
class AnalysisResult:
    """Items in report order plus their summary."""

    items: list[ExtractedItem]
    summary: AnalysisSummary

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary.

        Returns:
            Dictionary with ``items`` and ``summary`` keys.
        """
        return {
            "items": [asdict(item) for item in self.items],
            "summary": asdict(self.summary),
        }


@dataclass
class PageContext:
    """Page diagnostics attached to locator failures."""

    url: str
    title: str = ""
    page_type: str = "unknown"
    element_counts: dict[str, int] = field(default_factory=dict)
    strategy_counts: dict[str, int] = field(default_factory=dict)


@dataclass
class ExtractionSettings:
    """Tunable heuristic thresholds.

    Values are empirical and carried over as-is:
    - Node size: minimum rendered width/height for content-heuristic candidates
    - Text length: minimum text for any candidate, title length bounds
    - Price: upper bound for a plausible listing price
    """

    min_node_width: int = 100
    min_node_height: int = 100
    min_text_length: int = 20
    min_title_length: int = 3  # exclusive
    max_title_length: int = 200  # exclusive
    min_fallback_title_length: int = 5
    max_price: float = 10_000_000
    candidate_cap: int = 50
    render_timeout_ms: int = 10000
    settle_delay_ms: int = 2000
    max_pages: int = 5
