"""
Catalog Core Time — Clocks and Store-Local Time
=================================================
Engine logic never reads the wall clock. Availability checks take
the service time as an explicit argument; only the application
service layer asks a Clock for "now", and it asks in the store's
own timezone because recurring availability windows are measured
from local midnight.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional, Protocol


# ══════════════════════════════════════════════════════════════
# CLOCK PROTOCOL
# ══════════════════════════════════════════════════════════════

class Clock(Protocol):
    """Anything that can tell the current instant in UTC."""

    def now_utc(self) -> datetime:
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IMPLEMENTATIONS
# ══════════════════════════════════════════════════════════════

class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Clock pinned to one instant, for tests and order replays.

    The instant may be given in any timezone; now_utc() always
    answers in UTC.

    Usage:
        clock = FixedClock(datetime(2025, 1, 6, 12, tzinfo=timezone.utc))
        service.describe("pizza", selection, "pickup")  # served at noon
    """

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._instant = instant.astimezone(timezone.utc)

    def now_utc(self) -> datetime:
        return self._instant

    def advance(self, seconds: float) -> None:
        self._instant = self._instant + timedelta(seconds=seconds)


# ══════════════════════════════════════════════════════════════
# DEFAULT CLOCK (service layer only)
# ══════════════════════════════════════════════════════════════

_default_clock: Clock = SystemClock()


def set_default_clock(clock: Clock) -> None:
    global _default_clock
    _default_clock = clock


def get_default_clock() -> Clock:
    return _default_clock


def now_utc() -> datetime:
    return _default_clock.now_utc()


def now_local(tz: tzinfo, clock: Optional[Clock] = None) -> datetime:
    """Current instant expressed in the store timezone `tz`."""
    return (clock or _default_clock).now_utc().astimezone(tz)
