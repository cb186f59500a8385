"""Tests for item building and validation."""

from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest
from fakes import make_card

from listing_analyzer.builder import build_item, build_items, filter_items, is_valid_item
from listing_analyzer.models import UNKNOWN_TITLE

BASE_URL = "https://www.trademe.co.nz"


class TestBuildItem:
    """Tests for build_item."""

    @pytest.mark.asyncio
    async def test_builds_all_fields(self) -> None:
        card = make_card(
            title="Vintage Lego Castle Set",
            price="$1,250.00",
            extra="Auckland. Buy Now available",
            seller="brick_collector",
            image="/photos/castle.jpg",
        )

        item = await build_item(card, rank=3, base_url=BASE_URL)

        assert item is not None
        assert item.rank == 3
        assert item.title == "Vintage Lego Castle Set"
        assert item.price == 1250.0
        assert item.price_text == "$1,250.00"
        assert item.link == "https://www.trademe.co.nz/a/marketplace/listing/123"
        assert item.image == "https://www.trademe.co.nz/photos/castle.jpg"
        assert item.location == "Auckland"
        assert item.seller == "brick_collector"
        assert item.type == "Buy Now"
        datetime.fromisoformat(item.extracted_at)

    @pytest.mark.asyncio
    async def test_broken_node_yields_neutral_fields(self) -> None:
        element = AsyncMock()
        element.inner_text = AsyncMock(side_effect=RuntimeError("detached"))
        element.query_selector = AsyncMock(side_effect=RuntimeError("detached"))

        item = await build_item(element, rank=1)

        assert item is not None
        assert item.title == UNKNOWN_TITLE
        assert item.price == 0.0
        assert item.type == "Listing"

    @pytest.mark.asyncio
    async def test_construction_failure_returns_none(self) -> None:
        with patch("listing_analyzer.builder.datetime") as mock_datetime:
            mock_datetime.now.side_effect = RuntimeError("clock")
            assert await build_item(make_card(), rank=1) is None


class TestBuildItems:
    """Tests for batch building."""

    @pytest.mark.asyncio
    async def test_ranks_follow_candidate_order(self) -> None:
        cards = [make_card(title=f"Listing number {i}") for i in range(3)]

        items = await build_items(cards, start_rank=11, base_url=BASE_URL)

        assert [item.rank for item in items] == [11, 12, 13]
        assert [item.title for item in items] == ["Listing number 0", "Listing number 1", "Listing number 2"]

    @pytest.mark.asyncio
    async def test_failed_candidate_skipped(self, make_item) -> None:
        cards = [make_card(title="First listing"), make_card(title="Second listing")]
        second = make_item(title="Second listing", rank=2)

        with patch("listing_analyzer.builder.build_item", AsyncMock(side_effect=[None, second])):
            items = await build_items(cards)

        assert items == [second]

    @pytest.mark.asyncio
    async def test_empty(self) -> None:
        assert await build_items([]) == []


class TestValidation:
    """Tests for item validation rules."""

    def test_valid_with_price(self, make_item) -> None:
        assert is_valid_item(make_item(title="Bike", price=50.0)) is True

    def test_valid_with_price_text_only(self, make_item) -> None:
        assert is_valid_item(make_item(title="Bike", price=0.0, price_text="Reserve")) is True

    def test_invalid_without_price_signal(self, make_item) -> None:
        assert is_valid_item(make_item(title="Bike", price=0.0, price_text="")) is False

    def test_invalid_unknown_title(self, make_item) -> None:
        assert is_valid_item(make_item(title=UNKNOWN_TITLE, price=50.0)) is False

    def test_invalid_empty_title(self, make_item) -> None:
        assert is_valid_item(make_item(title="", price=50.0)) is False

    def test_filter_preserves_order(self, make_item) -> None:
        items = [
            make_item(title="A", price=10.0),
            make_item(title=UNKNOWN_TITLE, price=20.0),
            make_item(title="C", price=0.0, price_text="Auction"),
            make_item(title="", price=5.0),
        ]

        valid = filter_items(items)

        assert [item.title for item in valid] == ["A", "C"]
        assert all(item.title and item.title != UNKNOWN_TITLE for item in valid)
