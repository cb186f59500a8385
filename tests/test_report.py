"""Tests for report rendering and persistence."""

import json
from datetime import datetime
from pathlib import Path

from listing_analyzer.aggregator import aggregate
from listing_analyzer.report import (
    ITEMS_BANNER,
    NO_DATA_ROW,
    NO_ITEMS_ROW,
    PRICE_BANNER,
    SUMMARY_BANNER,
    TYPE_BANNER,
    ReportWriter,
    escape_field,
    format_number,
    format_percentage,
    render_report,
    unescape_field,
)

GENERATED_AT = datetime(2026, 10, 18, 9, 30, 0)


def _section(report: str, banner: str) -> list[str]:
    lines = report.splitlines()
    start = lines.index(banner) + 1
    section = []
    for line in lines[start:]:
        if not line:
            break
        section.append(line)
    return section


class TestEscaping:
    """Tests for field escaping."""

    def test_plain_value_unchanged(self) -> None:
        assert escape_field("Lego set") == "Lego set"

    def test_comma_quoted(self) -> None:
        assert escape_field("Bike, red") == '"Bike, red"'

    def test_quotes_doubled(self) -> None:
        assert escape_field('12" vinyl') == '"12"" vinyl"'

    def test_newline_quoted(self) -> None:
        assert escape_field("line1\nline2") == '"line1\nline2"'

    def test_none_is_empty(self) -> None:
        assert escape_field(None) == ""

    def test_unescape_inverts_escape(self) -> None:
        for value in ['a,"b"', "plain", '"', "x\ny", ""]:
            assert unescape_field(escape_field(value)) == value


class TestFormatting:
    """Tests for number and percentage formatting."""

    def test_integral_number(self) -> None:
        assert format_number(100.0) == "100"

    def test_fractional_number(self) -> None:
        assert format_number(99.5) == "99.5"
        assert format_number(1234.56) == "1234.56"

    def test_percentage(self) -> None:
        assert format_percentage(1, 3) == "33.3%"

    def test_percentage_zero_total(self) -> None:
        assert format_percentage(0, 0) == "0%"


class TestRenderReport:
    """Tests for render_report()."""

    def test_sections_in_order(self, make_item) -> None:
        report = render_report(aggregate([make_item("Bike", 120.0)]), GENERATED_AT)
        lines = report.splitlines()

        positions = [lines.index(banner) for banner in (SUMMARY_BANNER, ITEMS_BANNER, PRICE_BANNER, TYPE_BANNER)]
        assert positions == sorted(positions)

    def test_summary(self, make_item) -> None:
        result = aggregate([make_item("A", 1000.0), make_item("B", 500.0), make_item("C", 0.0, price_text="Reserve")])

        summary = _section(render_report(result, GENERATED_AT), SUMMARY_BANNER)

        assert summary[0] == f"Generated At:,{escape_field(GENERATED_AT.strftime('%c'))}"
        assert "Total Items Found:,3" in summary
        assert "Items With Price:,2" in summary
        assert 'Total Revenue:,"$1,500.00"' in summary
        assert "Average Price:,$750.00" in summary

    def test_item_table(self, make_item) -> None:
        items = [
            make_item("Cheap, used", 20.0, rank=2, price_text="$20", type="Buy Now"),
            make_item("Dear", 300.0, rank=1, location="Nelson", seller="sam", link="https://x.nz/1"),
        ]

        table = _section(render_report(aggregate(items), GENERATED_AT), ITEMS_BANNER)

        assert table[0] == "Rank,Title,Price ($),Price Text,Type,Location,Seller,URL,Extracted At"
        assert table[1] == "1,Dear,300,,Listing,Nelson,sam,https://x.nz/1,2026-10-18T12:00:00"
        assert table[2] == '2,"Cheap, used",20,$20,Buy Now,N/A,N/A,N/A,2026-10-18T12:00:00'

    def test_price_distribution(self, make_item) -> None:
        result = aggregate([make_item(price=75.0), make_item(price=0.0, price_text="Reserve")])

        table = _section(render_report(result, GENERATED_AT), PRICE_BANNER)

        assert table[0] == "Price Range,Count,Percentage"
        assert table[1] == "Under $50,0,0.0%"
        assert table[2] == "$50 - $200,1,100.0%"
        assert table[4] == '"$500 - $1,000",0,0.0%'
        assert len(table) == 6

    def test_type_distribution(self, make_item) -> None:
        result = aggregate([make_item(type="Auction"), make_item(type="Auction"), make_item(type="Buy Now")])

        table = _section(render_report(result, GENERATED_AT), TYPE_BANNER)

        assert table == ["Listing Type,Count,Percentage", "Auction,2,66.7%", "Buy Now,1,33.3%"]

    def test_empty_result(self) -> None:
        report = render_report(aggregate([]), GENERATED_AT)

        assert _section(report, ITEMS_BANNER) == [NO_ITEMS_ROW]
        assert _section(report, TYPE_BANNER) == [NO_DATA_ROW]

        prices = _section(report, PRICE_BANNER)
        assert all(row.endswith(",0,0%") for row in prices[1:])
        assert "Average Price:,$0.00" in _section(report, SUMMARY_BANNER)


class TestReportWriter:
    """Tests for ReportWriter."""

    def test_init_creates_directory(self, tmp_path: Path) -> None:
        reports_dir = tmp_path / "reports"
        ReportWriter(reports_dir)
        assert reports_dir.exists()

    def test_write_csv_with_bom(self, tmp_path: Path, make_item) -> None:
        writer = ReportWriter(tmp_path)

        path = writer.write_csv(aggregate([make_item("Bike", 120.0)]))

        raw = path.read_bytes()
        assert raw.startswith(b"\xef\xbb\xbf")
        assert path.name.startswith("listing-analysis-")
        assert SUMMARY_BANNER in raw.decode("utf-8-sig")

    def test_write_csv_without_bom(self, tmp_path: Path, make_item) -> None:
        writer = ReportWriter(tmp_path, bom=False)

        path = writer.write_csv(aggregate([make_item("Bike", 120.0)]))

        assert path.read_bytes().startswith(SUMMARY_BANNER.encode())

    def test_write_json(self, tmp_path: Path, make_item) -> None:
        writer = ReportWriter(tmp_path)

        path = writer.write_json(aggregate([make_item("Bike", 120.0)]))

        data = json.loads(path.read_text())
        assert data["summary"]["total_items"] == 1
        assert data["items"][0]["title"] == "Bike"

    def test_latest_report(self, tmp_path: Path) -> None:
        writer = ReportWriter(tmp_path)
        (tmp_path / "listing-analysis-2026-01-01.csv").write_text("old")
        (tmp_path / "listing-analysis-2026-02-01.csv").write_text("new")

        assert writer.latest_report() == tmp_path / "listing-analysis-2026-02-01.csv"
        assert writer.latest_report("2026-01-01") == tmp_path / "listing-analysis-2026-01-01.csv"
        assert writer.latest_report("2025-12-31") is None

    def test_latest_report_none(self, tmp_path: Path) -> None:
        assert ReportWriter(tmp_path).latest_report() is None
