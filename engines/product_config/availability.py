"""
Catalog Availability Check — Time-Based Option Disabling
==========================================================
Decides whether an option is orderable at a given service time.

Checks, first hit wins:
    1. disabled interval with start > end    → DISABLED_BLANKET
    2. service time inside disabled interval → DISABLED_TIME
    3. availability windows, if any exist:
         plain window (empty rule) contains the time → ENABLED
         rule occurs on the service date and the
           minutes-of-day window contains the time   → ENABLED
         nothing matched                             → DISABLED_AVAILABILITY
    4. no availability windows                       → ENABLED

Recurrence rules are RFC 5545 RRULE strings parsed with
python-dateutil. A rule that fails to parse is logged and treated
as not matching.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from dateutil.rrule import rrulestr

from core.time import is_same_day, minutes_since_midnight, start_of_day, to_epoch_millis
from engines.product_config.enums import DisableReason
from engines.product_config.models import (
    OPTION_ENABLED,
    IntervalSpec,
    OptionEnableState,
    RecurringAvailability,
)

logger = logging.getLogger("catalog.availability")
_default_logger = logger

UNBOUNDED = -1


def _in_plain_window(interval: IntervalSpec, t_ms: int) -> bool:
    return (
        (interval.start == UNBOUNDED or t_ms >= interval.start)
        and (interval.end == UNBOUNDED or t_ms <= interval.end)
    )


def _in_recurring_window(
    availability: RecurringAvailability,
    service_time: datetime,
    log: logging.Logger,
) -> bool:
    midnight = start_of_day(service_time)
    try:
        rule = rrulestr(availability.rrule, dtstart=midnight)
        occurrence = rule.after(midnight, inc=True)
    except (ValueError, TypeError) as exc:
        log.error(
            "Unable to parse recurrence rule %r, treating as unavailable: %s",
            availability.rrule, exc,
        )
        return False
    if occurrence is None or not is_same_day(occurrence, midnight):
        return False
    minutes = minutes_since_midnight(service_time)
    return availability.interval.start <= minutes <= availability.interval.end


def disable_data_check(
    disabled: Optional[IntervalSpec],
    availability: Sequence[RecurringAvailability],
    service_time: datetime,
    logger: Optional[logging.Logger] = None,
) -> OptionEnableState:
    """Availability verdict for one option at a timezone-aware service time."""
    log = logger or _default_logger
    t_ms = to_epoch_millis(service_time)

    if disabled is not None:
        if disabled.is_blanket:
            return OptionEnableState(reason=DisableReason.DISABLED_BLANKET)
        if disabled.start <= t_ms <= disabled.end:
            return OptionEnableState(reason=DisableReason.DISABLED_TIME, interval=disabled)

    if not availability:
        return OPTION_ENABLED

    for window in availability:
        if not window.rrule:
            if _in_plain_window(window.interval, t_ms):
                return OPTION_ENABLED
        elif _in_recurring_window(window, service_time, log):
            return OPTION_ENABLED

    return OptionEnableState(
        reason=DisableReason.DISABLED_AVAILABILITY, availability=tuple(availability),
    )
