from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class EmployeeBreak:
    """Normalized break row; several per attendance record are allowed."""

    break_id: int
    attendance_id: int
    user_id: int
    break_date: date
    break_start: datetime
    break_type: Optional[str] = None
    duration_limit: Optional[int] = None
    break_end: Optional[datetime] = None
    duration_minutes: int = 0
    penalty_minutes: int = 0

    @property
    def is_open(self) -> bool:
        return self.break_end is None
