"""Tests for the view projection helpers."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest

from trackers.common.projection import (
    count_by,
    progress_index,
    progress_percent,
    project,
    shopping_totals,
    where,
)
from trackers.shipping.models import ShipmentStatus

T0 = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)


@dataclass
class Row:
    name: str
    added_at: datetime = T0
    price: float = 0.0
    qty: int = 1
    priority: str | None = "medium"
    category: str = "other"
    purchased: bool = False


def names(rows):
    return [r.name for r in rows]


class TestSorting:
    def test_added_at_newest_first(self):
        rows = [
            Row("old", added_at=T0),
            Row("new", added_at=T0 + timedelta(days=1)),
            Row("mid", added_at=T0 + timedelta(hours=1)),
        ]
        assert names(project(rows)) == ["new", "mid", "old"]

    def test_added_at_ties_keep_input_order(self):
        later = T0 + timedelta(minutes=5)
        rows = [Row("a", added_at=T0), Row("b", added_at=later), Row("c", added_at=later)]
        assert names(project(rows, sort="added_at")) == ["b", "c", "a"]

    def test_price_highest_first(self):
        rows = [Row("cheap", price=1.5), Row("pricey", price=99), Row("mid", price=10)]
        assert names(project(rows, sort="price")) == ["pricey", "mid", "cheap"]

    def test_name_ignores_case_and_accents(self):
        rows = [Row("banana"), Row("Zebra"), Row("apple"), Row("Äpfel")]
        assert names(project(rows, sort="name")) == ["Äpfel", "apple", "banana", "Zebra"]

    def test_priority_rank_with_missing_value(self):
        rows = [
            Row("low", priority="low"),
            Row("high", priority="high"),
            Row("none", priority=None),
            Row("medium", priority="medium"),
        ]
        assert names(project(rows, sort="priority")) == ["high", "none", "medium", "low"]

    def test_unknown_priority_ranks_as_medium(self):
        rows = [Row("urgent", priority="urgent"), Row("high", priority="high"), Row("low", priority="low")]
        assert names(project(rows, sort="priority")) == ["high", "urgent", "low"]

    def test_none_keeps_insertion_order(self):
        rows = [Row("b"), Row("a"), Row("c")]
        assert names(project(rows, sort=None)) == ["b", "a", "c"]

    def test_unknown_sort_key(self):
        with pytest.raises(ValueError):
            project([Row("a")], sort="colour")

    def test_projection_is_deterministic(self):
        rows = [Row(f"r{i}", price=i % 3, added_at=T0 + timedelta(minutes=i % 2)) for i in range(10)]
        assert project(rows, sort="price") == project(rows, sort="price")
        assert project(rows) == project(rows)

    def test_input_is_not_mutated(self):
        rows = [Row("a", price=1), Row("b", price=2)]
        project(rows, sort="price")
        assert names(rows) == ["a", "b"]


class TestFiltering:
    def test_all_is_identity(self):
        assert where("category", "all") is None
        assert where("category", None) is None

    def test_filter_by_attribute(self):
        rows = [Row("milk", category="groceries"), Row("tv", category="electronics")]
        assert names(project(rows, where("category", "groceries"))) == ["milk"]

    def test_filter_matches_enum_values(self):
        @dataclass
        class Parcel:
            name: str
            status: ShipmentStatus
            added_at: datetime = T0

        parcels = [Parcel("a", ShipmentStatus.DELIVERED), Parcel("b", ShipmentStatus.IN_TRANSIT)]
        assert names(project(parcels, where("status", "delivered"), sort=None)) == ["a"]


class TestAggregates:
    def test_count_by(self):
        rows = [Row("a", category="home"), Row("b", category="home"), Row("c", category="health")]
        assert count_by(rows, "category") == {"home": 2, "health": 1}

    def test_shopping_totals(self):
        rows = [
            Row("a", price=2.5, qty=2),
            Row("b", price=10, qty=1, purchased=True),
            Row("c", price=0, qty=3),
        ]
        assert shopping_totals(rows) == {"total": 15.0, "purchased_total": 10.0, "remaining": 5.0}

    @pytest.mark.parametrize(
        "status, index, percent",
        [
            ("pending", 0, 0),
            ("in_transit", 1, 33),
            ("out_for_delivery", 2, 67),
            ("delivered", 3, 100),
            ("failed_attempt", 1, 33),
            (ShipmentStatus.EXCEPTION, 1, 33),
        ],
    )
    def test_progress(self, status, index, percent):
        assert progress_index(status) == index
        assert progress_percent(status) == percent
