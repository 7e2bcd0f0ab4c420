from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, OvertimeStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Repository interface for AttendanceRecord.

    Every ``*_if_*`` method is a compare-and-set: it applies the change only
    when the row is still in the expected prior state and returns False when
    another actor got there first.
    """

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, on_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def seed_pending(self, *, session_id: int, on_date: date, user_ids: Iterable[int]) -> int:
        """Insert one pending record per user; existing (user, date) rows are kept. Returns rows inserted."""

        raise NotImplementedError

    def list_pending_without_checkin(self, session_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def mark_absent_if_pending(self, record_id: int) -> bool:
        raise NotImplementedError

    def list_open_checked_in(self) -> Sequence[AttendanceRecord]:
        """Records with a time_in, no time_out and status present/late."""

        raise NotImplementedError

    def auto_checkout_if_open(self, record_id: int, *, time_out: datetime, notes: str) -> bool:
        raise NotImplementedError

    def list_with_time_in(self) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def update_status_if_unchanged(
        self,
        record_id: int,
        *,
        expected: AttendanceStatus,
        status: AttendanceStatus,
        minutes_late: int,
    ) -> bool:
        raise NotImplementedError

    def list_completed(self) -> Sequence[AttendanceRecord]:
        """Records with both time_in and time_out."""

        raise NotImplementedError

    def update_hours(self, record_id: int, hours_worked: float) -> bool:
        raise NotImplementedError

    def list_open_legacy_breaks(self) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def end_legacy_break_if_open(self, record_id: int, *, break_end: datetime) -> bool:
        raise NotImplementedError

    def set_legacy_break(self, record_id: int, *, break_start: datetime | None = None, break_end: datetime | None = None) -> None:
        """Mirror a normalized break onto the legacy columns (only the given fields change)."""

        raise NotImplementedError

    def check_in_if_open(self, record_id: int, *, time_in: datetime, status: AttendanceStatus, minutes_late: int) -> bool:
        """pending/absent without time_in -> checked in."""

        raise NotImplementedError

    def create_checked_in(
        self,
        *,
        session_id: int,
        user_id: int,
        on_date: date,
        time_in: datetime,
        status: AttendanceStatus,
        minutes_late: int,
    ) -> Optional[int]:
        """Insert a checked-in record; None if a record for (user, date) appeared meanwhile."""

        raise NotImplementedError

    def check_out_if_open(
        self,
        record_id: int,
        *,
        time_out: datetime,
        status: AttendanceStatus,
        hours_worked: float,
        overtime_minutes: int,
        overtime_status: OvertimeStatus,
    ) -> bool:
        raise NotImplementedError

    def update_notes(self, record_id: int, notes: str) -> None:
        raise NotImplementedError

    def save_manual(self, record: AttendanceRecord) -> None:
        """Administrative overwrite of status, times and hours."""

        raise NotImplementedError

    def delete_older_than(self, cutoff: date) -> int:
        raise NotImplementedError
