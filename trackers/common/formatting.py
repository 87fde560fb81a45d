"""Date, currency and id helpers shared by the trackers' view layers."""

from __future__ import annotations

import math
import secrets
import string
import time
from datetime import datetime, timezone

_ID_ALPHABET = string.ascii_lowercase + string.digits


def parse_datetime(value: datetime | str | None) -> datetime | None:
    """Parse an ISO timestamp (or pass a datetime through); None if invalid."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_date(
    value: datetime | str | None,
    style: str = "long",
    now: datetime | None = None,
) -> str:
    """Format a date for display.

    Args:
        value: datetime or ISO string.
        style: "long" (Monday, January 5, 2026), "short" (Jan 5, 2026) or
            "relative" (just now / 5m ago / 3h ago / 2d ago, older dates fall
            back to the long form).
        now: Reference time for "relative" (defaults to the current time).
    """
    dt = parse_datetime(value)
    if dt is None:
        return "Unknown date"

    if style == "relative":
        now = now or datetime.now(timezone.utc)
        seconds = (now - dt).total_seconds()
        minutes = math.floor(seconds / 60)
        hours = math.floor(seconds / 3600)
        days = math.floor(seconds / 86400)
        if minutes < 1:
            return "just now"
        if minutes < 60:
            return f"{minutes}m ago"
        if hours < 24:
            return f"{hours}h ago"
        if days < 7:
            return f"{days}d ago"

    if style == "short":
        return f"{dt:%b} {dt.day}, {dt.year}"

    return f"{dt:%A}, {dt:%B} {dt.day}, {dt.year}"


def format_currency(amount: float) -> str:
    """Format a number as USD, e.g. $1,234.50 or -$3.00."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def uid() -> str:
    """Short random id (8 lowercase alphanumerics)."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(8))


def timestamp_id(prefix: str) -> str:
    """Time-based id such as pkg_1760803200000."""
    return f"{prefix}_{time.time_ns() // 1_000_000}"
