from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import EmployeeBreak


class BreakRepository(Protocol):
    def get_open_for_record(self, attendance_id: int) -> Optional[EmployeeBreak]:
        raise NotImplementedError

    def list_open(self) -> Sequence[EmployeeBreak]:
        raise NotImplementedError

    def count_for_record(self, attendance_id: int) -> int:
        raise NotImplementedError

    def sum_minutes_for_record(self, attendance_id: int) -> int:
        raise NotImplementedError

    def create(
        self,
        *,
        attendance_id: int,
        user_id: int,
        break_date: date,
        break_start: datetime,
        break_type: Optional[str],
        duration_limit: int,
    ) -> int:
        raise NotImplementedError

    def end_if_open(self, break_id: int, *, break_end: datetime, duration_minutes: int, penalty_minutes: int = 0) -> bool:
        raise NotImplementedError

    def delete_older_than(self, cutoff: date) -> int:
        raise NotImplementedError
