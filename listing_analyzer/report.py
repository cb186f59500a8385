"""Tabular report rendering and persistence for analysis results."""

import json
import logging
from datetime import datetime
from pathlib import Path

from listing_analyzer.models import AnalysisResult, ExtractedItem

logger = logging.getLogger(__name__)

SUMMARY_BANNER = "=== LISTING ANALYSIS SUMMARY ==="
ITEMS_BANNER = "=== ITEMS DETAILS ==="
PRICE_BANNER = "=== PRICE DISTRIBUTION ==="
TYPE_BANNER = "=== LISTING TYPE DISTRIBUTION ==="

ITEM_COLUMNS = ["Rank", "Title", "Price ($)", "Price Text", "Type", "Location", "Seller", "URL", "Extracted At"]
PRICE_COLUMNS = ["Price Range", "Count", "Percentage"]
TYPE_COLUMNS = ["Listing Type", "Count", "Percentage"]

NO_ITEMS_ROW = "no items data available"
NO_DATA_ROW = "no data available"

MISSING_VALUE = "N/A"


def escape_field(value: object) -> str:
    """Escape a field value for a comma-separated row.

    Values containing a comma, double quote, or newline are wrapped in
    double quotes with inner quotes doubled.
    """
    if value is None:
        return ""
    text = str(value)
    if "," in text or '"' in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def unescape_field(value: str) -> str:
    """Inverse of ``escape_field``."""
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1].replace('""', '"')
    return value


def format_number(value: float) -> str:
    """Bare number: integral values without decimals, others trimmed."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_percentage(count: int, total: int) -> str:
    if total <= 0:
        return "0%"
    return f"{count / total * 100:.1f}%"


def _item_row(item: ExtractedItem) -> str:
    fields = [
        str(item.rank),
        escape_field(item.title),
        format_number(item.price),
        escape_field(item.price_text),
        escape_field(item.type),
        escape_field(item.location or MISSING_VALUE),
        escape_field(item.seller or MISSING_VALUE),
        escape_field(item.link or MISSING_VALUE),
        escape_field(item.extracted_at),
    ]
    return ",".join(fields)


def _distribution_rows(counts: dict[str, int], total: int) -> list[str]:
    return [f"{escape_field(label)},{count},{format_percentage(count, total)}" for label, count in counts.items()]


def render_report(result: AnalysisResult, generated_at: datetime | None = None) -> str:
    """Render an analysis result as a sectioned comma-separated document.

    Sections, each introduced by a banner line:
    1. Summary totals
    2. Item table in result order
    3. Price distribution (percent of priced items)
    4. Listing type distribution (percent of all items)

    Args:
        result: Aggregated analysis result.
        generated_at: Timestamp for the summary. Defaults to now.

    Returns:
        Report text.
    """
    generated_at = generated_at or datetime.now()
    summary = result.summary

    lines = [
        SUMMARY_BANNER,
        f"Generated At:,{escape_field(generated_at.strftime('%c'))}",
        f"Total Items Found:,{summary.total_items}",
        f"Items With Price:,{summary.items_with_prices}",
        f"Total Revenue:,{escape_field(f'${summary.total_revenue:,.2f}')}",
        f"Average Price:,{escape_field(f'${summary.average_price:.2f}')}",
        "",
        ITEMS_BANNER,
    ]

    if result.items:
        lines.append(",".join(ITEM_COLUMNS))
        lines.extend(_item_row(item) for item in result.items)
    else:
        lines.append(NO_ITEMS_ROW)
    lines.append("")

    lines.append(PRICE_BANNER)
    if summary.price_buckets:
        lines.append(",".join(PRICE_COLUMNS))
        lines.extend(_distribution_rows(summary.price_buckets, summary.items_with_prices))
    else:
        lines.append(NO_DATA_ROW)
    lines.append("")

    lines.append(TYPE_BANNER)
    if summary.type_counts:
        lines.append(",".join(TYPE_COLUMNS))
        lines.extend(_distribution_rows(summary.type_counts, summary.total_items))
    else:
        lines.append(NO_DATA_ROW)

    return "\n".join(lines) + "\n"


class ReportWriter:
    """Writes analysis reports (CSV text and JSON snapshot) to disk."""

    def __init__(self, reports_dir: Path, bom: bool = True):
        """Initialize report writer.

        Args:
            reports_dir: Directory for report files.
            bom: Prefix CSV reports with a UTF-8 byte-order mark.
        """
        self.reports_dir = Path(reports_dir)
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        self.bom = bom

    def _report_path(self, suffix: str) -> Path:
        date = datetime.now().strftime("%Y-%m-%d")
        return self.reports_dir / f"listing-analysis-{date}.{suffix}"

    def write_csv(self, result: AnalysisResult) -> Path:
        """Write the tabular report.

        Args:
            result: Aggregated analysis result.

        Returns:
            Path to the report file.
        """
        path = self._report_path("csv")
        encoding = "utf-8-sig" if self.bom else "utf-8"
        path.write_text(render_report(result), encoding=encoding)

        logger.info(f"Report written: {path}")
        return path

    def write_json(self, result: AnalysisResult) -> Path:
        """Write a JSON snapshot of the result next to the report.

        Args:
            result: Aggregated analysis result.

        Returns:
            Path to the JSON file.
        """
        path = self._report_path("json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2)
        return path

    def latest_report(self, date_str: str | None = None) -> Path | None:
        """Find a stored report.

        Args:
            date_str: Date in YYYY-MM-DD format. Defaults to the newest report.

        Returns:
            Path to the report, or None if not found.
        """
        if date_str:
            path = self.reports_dir / f"listing-analysis-{date_str}.csv"
            return path if path.exists() else None

        reports = sorted(self.reports_dir.glob("listing-analysis-*.csv"), reverse=True)
        return reports[0] if reports else None
