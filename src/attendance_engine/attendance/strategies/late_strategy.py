from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import minutes_between
from ...core.enums import AttendanceStatus
from ...shifts.window import ShiftWindow
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in; lateness counts from shift start, not from the end of grace."""

    def decide_checkin(self, *, now: datetime, window: ShiftWindow) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, minutes_late=max(minutes_between(window.start, now), 0))
