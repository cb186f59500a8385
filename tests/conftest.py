"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from listing_analyzer.models import ExtractedItem


@pytest.fixture
def sample_config(tmp_path: Path) -> Path:
    """Create a sample config file for testing."""
    config_path = tmp_path / "config.yaml"
    config_content = f"""
site:
  base_url: https://www.trademe.co.nz
  domain: trademe.co.nz

analysis:
  category: toys
  max_items: 25
  timeout_seconds: 5

thresholds:
  settle_delay_ms: 0
  max_pages: 3

output:
  base_dir: {tmp_path / "output"}
  reports_dir: reports
  bom: false
"""
    config_path.write_text(config_content)
    return config_path


@pytest.fixture
def make_item():
    """Factory for ExtractedItem with sensible defaults."""

    def _make(title: str = "Lego Set", price: float = 100.0, **kwargs) -> ExtractedItem:
        kwargs.setdefault("rank", 1)
        kwargs.setdefault("extracted_at", "2026-10-18T12:00:00")
        return ExtractedItem(title=title, price=price, **kwargs)

    return _make
