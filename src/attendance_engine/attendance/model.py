from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, OvertimeStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one logical day.

    The strict key is (user_id, attendance_date); ``session_id`` only says
    which session row backs the day. ``break_start``/``break_end`` are the
    legacy single-break columns kept alongside the ``breaks`` table.
    """

    record_id: int
    user_id: int
    attendance_date: date
    status: AttendanceStatus
    session_id: Optional[int] = None
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    minutes_late: int = 0
    hours_worked: float = 0.0
    overtime_minutes: int = 0
    overtime_status: OvertimeStatus = OvertimeStatus.NONE
    auto_checkout: bool = False
    notes: Optional[str] = None
    confirmed_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.time_in is not None and self.time_out is None

    @property
    def on_legacy_break(self) -> bool:
        return self.break_start is not None and self.break_end is None


def append_note(existing: Optional[str], note: str, *, separator: str) -> str:
    return f"{existing}{separator}{note}" if existing else note
