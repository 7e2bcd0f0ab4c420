from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ...common.datetime_utils import minutes_between
from .base import HoursCalculator


def span_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end; an end before the start is taken as the next day."""
    if end < start:
        end += timedelta(hours=24)
    return minutes_between(start, end)


def resolve_break_minutes(
    normalized_minutes: int,
    legacy_start: Optional[datetime] = None,
    legacy_end: Optional[datetime] = None,
) -> int:
    """Normalized break table wins; the legacy pair is used only when it sums to zero."""
    if normalized_minutes > 0:
        return int(normalized_minutes)
    if legacy_start is not None and legacy_end is not None:
        return span_minutes(legacy_start, legacy_end)
    return 0


class StandardHoursCalculator(HoursCalculator):
    """Standard rule: (out - in) - break minutes, not below 0."""

    def worked_minutes(self, *, time_in: datetime, time_out: datetime, break_minutes: int) -> int:
        return max(span_minutes(time_in, time_out) - int(break_minutes or 0), 0)
