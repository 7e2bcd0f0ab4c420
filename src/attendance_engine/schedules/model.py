from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.constants import DEFAULT_WORKING_DAYS
from ..core.enums import ScheduleStatus
from ..shifts.window import ShiftWindow, shift_window


@dataclass(frozen=True)
class Schedule:
    """Domain entity: a named shift template.

    Created by administrators; read-only to the engine. ``working_days`` holds
    ISO weekday numbers (Monday=1) and is the cadence used for weekend
    suppression.
    """

    schedule_id: int
    name: str
    time_in: time
    time_out: time
    break_time: Optional[time] = None
    grace_period_minutes: int = 0
    late_threshold_minutes: int = 0
    is_overnight: bool = False
    working_days: frozenset[int] = DEFAULT_WORKING_DAYS
    status: ScheduleStatus = ScheduleStatus.ACTIVE

    def window_on(self, on_date: date) -> ShiftWindow:
        return shift_window(self.time_in, self.time_out, on_date)

    def works_on(self, on_date: date) -> bool:
        return on_date.isoweekday() in self.working_days


def parse_working_days(value: str | None) -> frozenset[int]:
    if not value:
        return DEFAULT_WORKING_DAYS
    days = frozenset(int(part) for part in str(value).split(",") if part.strip())
    invalid = [d for d in days if d < 1 or d > 7]
    if invalid:
        raise ValueError(f"Invalid ISO weekday(s): {sorted(invalid)}")
    return days
