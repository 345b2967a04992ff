"""
Catalog Core Time — Temporal Helpers
======================================
Pure functions used by availability checks.
All functions take explicit datetime arguments — no hidden clock access.

Catalog intervals are stored as integers: epoch milliseconds for
absolute windows, minutes since local midnight for windows that
repeat with a recurrence rule. "Local" always means the timezone
carried by the service time itself.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


# ══════════════════════════════════════════════════════════════
# PURE TEMPORAL FUNCTIONS
# ══════════════════════════════════════════════════════════════

def _require_aware(dt: datetime) -> None:
    if dt.tzinfo is None:
        raise ValueError("Timezone-aware datetime required.")


def to_epoch_millis(dt: datetime) -> int:
    """Milliseconds since the Unix epoch for an aware datetime."""
    _require_aware(dt)
    return int(dt.timestamp() * 1000)


def start_of_day(dt: datetime) -> datetime:
    """Local midnight of the day `dt` falls on, same tzinfo."""
    _require_aware(dt)
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def minutes_since_midnight(dt: datetime) -> int:
    """Whole minutes elapsed since local midnight."""
    return dt.hour * 60 + dt.minute


def is_same_day(a: datetime, b: datetime) -> bool:
    """True when both datetimes fall on the same calendar date in `b`'s timezone."""
    if a.tzinfo is not None and b.tzinfo is not None:
        a = a.astimezone(b.tzinfo)
    return a.date() == b.date()


def resolve_timezone(name: str) -> tzinfo:
    """
    tzinfo for an IANA zone name ("Europe/Amsterdam").

    "UTC" resolves without consulting the tz database.
    """
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone '{name}'.") from None
