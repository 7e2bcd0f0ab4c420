from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.enums import AttendanceStatus
from ..schedules.model import Schedule
from ..shifts.window import ShiftWindow
from .strategies.base import AttendanceStrategy
from .strategies.early_leave_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, now: datetime, window: ShiftWindow, schedule: Schedule) -> AttendanceStrategy:
        late_start = window.start + timedelta(minutes=int(schedule.grace_period_minutes or 0))
        if now <= late_start:
            return PresentStrategy()
        return LateStrategy()

    def for_checkout(self, *, now: datetime, window: ShiftWindow, current_status: AttendanceStatus) -> AttendanceStrategy:
        if now < window.end and current_status == AttendanceStatus.PRESENT:
            return EarlyLeaveStrategy()
        return PresentStrategy()
