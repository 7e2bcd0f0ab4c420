from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import SessionStatus


@dataclass(frozen=True)
class AttendanceSession:
    """One calendar-date instance of a schedule; unique per (schedule_id, date)."""

    session_id: int
    schedule_id: int
    date: date
    status: SessionStatus
    opened_at: Optional[datetime] = None
    locked_at: Optional[datetime] = None
    locked_by: Optional[int] = None
    created_by: Optional[int] = None
    attendance_required: bool = True
    session_type: Optional[str] = None
    completion_reason: Optional[str] = None
