from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.window import ShiftWindow


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    minutes_late: int = 0
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, window: ShiftWindow) -> StatusDecision:
        raise NotImplementedError

    def decide_checkout(self, *, now: datetime, window: ShiftWindow, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
