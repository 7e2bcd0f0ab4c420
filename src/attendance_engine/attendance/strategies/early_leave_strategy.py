from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...shifts.window import ShiftWindow
from .base import AttendanceStrategy, StatusDecision


class EarlyLeaveStrategy(AttendanceStrategy):
    """Check-out before shift end (only when check-in was on time)."""

    def decide_checkin(self, *, now: datetime, window: ShiftWindow) -> StatusDecision:
        raise NotImplementedError("EarlyLeaveStrategy only decides check-outs")

    def decide_checkout(self, *, now: datetime, window: ShiftWindow, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LEFT_EARLY)
