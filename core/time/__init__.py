"""
Catalog Core Time — Public API
================================
Explicit clock protocol and temporal helpers.
Doctrine: NO datetime.now() in engine logic.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    get_default_clock,
    now_local,
    now_utc,
    set_default_clock,
)
from core.time.temporal import (
    is_same_day,
    minutes_since_midnight,
    resolve_timezone,
    start_of_day,
    to_epoch_millis,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "get_default_clock",
    "set_default_clock",
    "now_utc",
    "now_local",
    "to_epoch_millis",
    "start_of_day",
    "minutes_since_midnight",
    "is_same_day",
    "resolve_timezone",
]
