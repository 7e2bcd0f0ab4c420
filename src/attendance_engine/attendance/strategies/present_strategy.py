from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...shifts.window import ShiftWindow
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """Check-in within the grace period, normal check-out."""

    def decide_checkin(self, *, now: datetime, window: ShiftWindow) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
