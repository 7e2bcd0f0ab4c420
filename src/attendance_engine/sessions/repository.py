from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceSession


class SessionRepository(Protocol):
    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_for_schedule_and_date(self, schedule_id: int, on_date: date) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_active_for_date(self, on_date: date) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def create_if_absent(
        self,
        *,
        schedule_id: int,
        on_date: date,
        opened_at: datetime,
        created_by: int,
        session_type: Optional[str] = None,
    ) -> tuple[AttendanceSession, bool]:
        """Create the active session for (schedule, date) unless one exists.

        Returns the stored session and whether this call created it.
        """

        raise NotImplementedError

    def list_active(self) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def list_active_before(self, on_date: date) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def lock_if_active(self, session_id: int, *, locked_at: datetime, locked_by: int, reason: str) -> bool:
        """active -> locked; False when the session was no longer active."""

        raise NotImplementedError

    def delete_older_than(self, cutoff: date) -> int:
        raise NotImplementedError
