from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class HoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked hours)."""

    @abstractmethod
    def worked_minutes(self, *, time_in: datetime, time_out: datetime, break_minutes: int) -> int:
        raise NotImplementedError

    def hours_worked(self, *, time_in: datetime, time_out: datetime, break_minutes: int) -> float:
        minutes = self.worked_minutes(time_in=time_in, time_out=time_out, break_minutes=break_minutes)
        return round(minutes / 60, 2)
