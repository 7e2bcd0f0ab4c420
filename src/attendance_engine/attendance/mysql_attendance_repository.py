from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from ..core.enums import AttendanceStatus, OvertimeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import compare_and_set, db_cursor, delete_before, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, session_id, user_id, attendance_date, time_in, time_out,
    break_start, break_end, status, minutes_late, hours_worked,
    overtime_minutes, overtime_status, auto_checkout, notes, confirmed_at
"""

_CHECKED_IN = (AttendanceStatus.PRESENT.value, AttendanceStatus.LATE.value)


def _row_to_record(r: dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        session_id=r.get("session_id"),
        user_id=int(r["user_id"]),
        attendance_date=r["attendance_date"],
        time_in=r.get("time_in"),
        time_out=r.get("time_out"),
        break_start=r.get("break_start"),
        break_end=r.get("break_end"),
        status=AttendanceStatus(r["status"]),
        minutes_late=int(r.get("minutes_late") or 0),
        hours_worked=float(r.get("hours_worked") or 0),
        overtime_minutes=int(r.get("overtime_minutes") or 0),
        overtime_status=OvertimeStatus(r.get("overtime_status") or OvertimeStatus.NONE.value),
        auto_checkout=bool(r.get("auto_checkout")),
        notes=r.get("notes"),
        confirmed_at=r.get("confirmed_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select(self, where: str, params: tuple = ()) -> list[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY attendance_date, record_id",
                params,
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def _update(self, sql: str, params: tuple) -> bool:
        return compare_and_set(self._conn_factory, sql, params)

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_user_and_date(self, user_id: int, on_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE user_id=%s AND attendance_date=%s",
                (int(user_id), on_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def seed_pending(self, *, session_id: int, on_date: date, user_ids: Iterable[int]) -> int:
        rows = [(int(session_id), int(uid), on_date, AttendanceStatus.PENDING.value) for uid in user_ids]
        if not rows:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT IGNORE INTO attendance_records(session_id, user_id, attendance_date, status)
                VALUES(%s,%s,%s,%s)
                """,
                rows,
            )
            return int(cur.rowcount or 0)

    def list_pending_without_checkin(self, session_id: int) -> Sequence[AttendanceRecord]:
        return self._select(
            "session_id=%s AND status=%s AND time_in IS NULL",
            (int(session_id), AttendanceStatus.PENDING.value),
        )

    def mark_absent_if_pending(self, record_id: int) -> bool:
        return self._update(
            "UPDATE attendance_records SET status=%s WHERE record_id=%s AND status=%s AND time_in IS NULL",
            (AttendanceStatus.ABSENT.value, int(record_id), AttendanceStatus.PENDING.value),
        )

    def list_open_checked_in(self) -> Sequence[AttendanceRecord]:
        return self._select("time_in IS NOT NULL AND time_out IS NULL AND status IN (%s, %s)", _CHECKED_IN)

    def auto_checkout_if_open(self, record_id: int, *, time_out: datetime, notes: str) -> bool:
        return self._update(
            """
            UPDATE attendance_records
            SET time_out=%s, auto_checkout=1, notes=%s
            WHERE record_id=%s AND time_out IS NULL AND status IN (%s, %s)
            """,
            (time_out, notes, int(record_id), *_CHECKED_IN),
        )

    def list_with_time_in(self) -> Sequence[AttendanceRecord]:
        return self._select("time_in IS NOT NULL")

    def update_status_if_unchanged(
        self,
        record_id: int,
        *,
        expected: AttendanceStatus,
        status: AttendanceStatus,
        minutes_late: int,
    ) -> bool:
        return self._update(
            "UPDATE attendance_records SET status=%s, minutes_late=%s WHERE record_id=%s AND status=%s",
            (status.value, int(minutes_late), int(record_id), expected.value),
        )

    def list_completed(self) -> Sequence[AttendanceRecord]:
        return self._select("time_in IS NOT NULL AND time_out IS NOT NULL")

    def update_hours(self, record_id: int, hours_worked: float) -> bool:
        return self._update(
            "UPDATE attendance_records SET hours_worked=%s WHERE record_id=%s",
            (round(float(hours_worked), 2), int(record_id)),
        )

    def list_open_legacy_breaks(self) -> Sequence[AttendanceRecord]:
        return self._select("break_start IS NOT NULL AND break_end IS NULL")

    def end_legacy_break_if_open(self, record_id: int, *, break_end: datetime) -> bool:
        return self._update(
            "UPDATE attendance_records SET break_end=%s WHERE record_id=%s AND break_end IS NULL",
            (break_end, int(record_id)),
        )

    def set_legacy_break(self, record_id: int, *, break_start: datetime | None = None, break_end: datetime | None = None) -> None:
        if break_start is not None:
            # A new break resets the legacy pair.
            self._update(
                "UPDATE attendance_records SET break_start=%s, break_end=NULL WHERE record_id=%s",
                (break_start, int(record_id)),
            )
        if break_end is not None:
            self._update(
                "UPDATE attendance_records SET break_end=%s WHERE record_id=%s",
                (break_end, int(record_id)),
            )

    def check_in_if_open(self, record_id: int, *, time_in: datetime, status: AttendanceStatus, minutes_late: int) -> bool:
        return self._update(
            """
            UPDATE attendance_records
            SET time_in=%s, status=%s, minutes_late=%s, confirmed_at=%s
            WHERE record_id=%s AND status IN (%s, %s) AND time_in IS NULL
            """,
            (
                time_in,
                status.value,
                int(minutes_late),
                time_in,
                int(record_id),
                AttendanceStatus.PENDING.value,
                AttendanceStatus.ABSENT.value,
            ),
        )

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO attendance_records(
                    session_id, user_id, attendance_date, time_in, status, minutes_late, confirmed_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(session_id), int(user_id), on_date, time_in, status.value, int(minutes_late), time_in),
            )
            return int(cur.lastrowid) if cur.rowcount == 1 else None

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
        return self._update(
            """
            UPDATE attendance_records
            SET time_out=%s, status=%s, hours_worked=%s, overtime_minutes=%s, overtime_status=%s
            WHERE record_id=%s AND time_in IS NOT NULL AND time_out IS NULL
            """,
            (
                time_out,
                status.value,
                round(float(hours_worked), 2),
                int(overtime_minutes),
                overtime_status.value,
                int(record_id),
            ),
        )

    def update_notes(self, record_id: int, notes: str) -> None:
        self._update("UPDATE attendance_records SET notes=%s WHERE record_id=%s", (notes, int(record_id)))

    def save_manual(self, record: AttendanceRecord) -> None:
        self._update(
            """
            UPDATE attendance_records
            SET status=%s, time_in=%s, time_out=%s, break_start=%s, break_end=%s,
                minutes_late=%s, hours_worked=%s, notes=%s
            WHERE record_id=%s
            """,
            (
                record.status.value,
                record.time_in,
                record.time_out,
                record.break_start,
                record.break_end,
                int(record.minutes_late),
                round(float(record.hours_worked), 2),
                record.notes,
                int(record.record_id),
            ),
        )

    def delete_older_than(self, cutoff: date) -> int:
        return delete_before(self._conn_factory, "attendance_records", "attendance_date", cutoff)
