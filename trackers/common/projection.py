"""View projection: filtered, sorted read views of a collection.

Everything here is a pure function of its inputs. Trackers call project()
after every mutation and hand the result to the view-model layer.
"""

from __future__ import annotations

import unicodedata
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

T = TypeVar("T")

ALL = "all"

PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}
DEFAULT_PRIORITY_RANK = PRIORITY_RANK["medium"]

PROGRESS_STEPS = ("Ordered", "In Transit", "Out for Delivery", "Delivered")
PROGRESS_INDEX = {
    "pending": 0,
    "in_transit": 1,
    "out_for_delivery": 2,
    "delivered": 3,
}
DEFAULT_PROGRESS_INDEX = 1

SORT_KEYS = ("added_at", "price", "name", "priority")


def _value(entity: Any, field: str) -> Any:
    value = getattr(entity, field, None)
    # str-valued enums compare by their value
    return getattr(value, "value", value)


def where(field: str, value: Any) -> Callable[[Any], bool] | None:
    """Equality predicate on one attribute; "all"/None means no filter."""
    if value is None or value == ALL:
        return None
    return lambda entity: _value(entity, field) == value


def collation_key(text: str | None) -> tuple[str, str]:
    """Locale-style sort key: accent- and case-insensitive, then exact."""
    text = text or ""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return (base.casefold(), text)


def priority_rank(priority: Any) -> int:
    return PRIORITY_RANK.get(getattr(priority, "value", priority), DEFAULT_PRIORITY_RANK)


def project(
    entities: Iterable[T],
    filter: Callable[[T], bool] | None = None,
    sort: str | None = "added_at",
) -> list[T]:
    """Return the entities to display, in display order.

    Args:
        entities: Collection values in insertion order.
        filter: Predicate to keep an entity; None keeps everything.
        sort: One of SORT_KEYS, or None to keep insertion order.

    Sorting is stable, so ties keep their relative input order.
    """
    items = [e for e in entities if filter is None or filter(e)]

    if sort is None:
        return items
    if sort == "added_at":
        # reverse=True keeps ties stable as well
        items.sort(key=lambda e: _value(e, "added_at"), reverse=True)
    elif sort == "price":
        items.sort(key=lambda e: _value(e, "price") or 0, reverse=True)
    elif sort == "name":
        items.sort(key=lambda e: collation_key(_value(e, "name")))
    elif sort == "priority":
        items.sort(key=lambda e: priority_rank(_value(e, "priority")))
    else:
        raise ValueError(f"Unknown sort key: {sort!r} (expected one of {SORT_KEYS})")
    return items


# === Aggregates ===

def count_by(entities: Iterable[Any], field: str) -> dict[Any, int]:
    """Number of entities per distinct attribute value, first-seen order."""
    return dict(Counter(_value(e, field) for e in entities))


def shopping_totals(items: Iterable[Any]) -> dict[str, float]:
    """Sum of price x qty overall, for purchased items, and what remains."""
    total = 0.0
    purchased_total = 0.0
    for item in items:
        line_total = item.price * item.qty
        total += line_total
        if item.purchased:
            purchased_total += line_total
    return {
        "total": total,
        "purchased_total": purchased_total,
        "remaining": total - purchased_total,
    }


def progress_index(status: Any) -> int:
    """Progress-bar step (0-3) for a shipment status."""
    return PROGRESS_INDEX.get(getattr(status, "value", status), DEFAULT_PROGRESS_INDEX)


def progress_percent(status: Any, steps: Sequence[str] = PROGRESS_STEPS) -> int:
    return round(progress_index(status) / (len(steps) - 1) * 100)
