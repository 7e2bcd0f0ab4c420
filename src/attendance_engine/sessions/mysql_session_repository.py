from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..core.enums import SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import compare_and_set, db_cursor, delete_before, fetchall, fetchone
from .model import AttendanceSession
from .repository import SessionRepository

_COLUMNS = """
    session_id, schedule_id, date, status, opened_at, locked_at, locked_by,
    created_by, attendance_required, session_type, completion_reason
"""


def _row_to_session(r: dict[str, Any]) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["session_id"]),
        schedule_id=int(r["schedule_id"]),
        date=r["date"],
        status=SessionStatus(r["status"]),
        opened_at=r.get("opened_at"),
        locked_at=r.get("locked_at"),
        locked_by=r.get("locked_by"),
        created_by=r.get("created_by"),
        attendance_required=bool(r.get("attendance_required", True)),
        session_type=r.get("session_type"),
        completion_reason=r.get("completion_reason"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _row_to_session(r) if r else None

    def get_for_schedule_and_date(self, schedule_id: int, on_date: date) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_sessions WHERE schedule_id=%s AND date=%s",
                (int(schedule_id), on_date),
            )
            r = fetchone(cur)
            return _row_to_session(r) if r else None

    def get_active_for_date(self, on_date: date) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_sessions
                WHERE date=%s AND status=%s
                ORDER BY session_id LIMIT 1
                """,
                (on_date, SessionStatus.ACTIVE.value),
            )
            r = fetchone(cur)
            return _row_to_session(r) if r else None

    def create_if_absent(
        self,
        *,
        schedule_id: int,
        on_date: date,
        opened_at: datetime,
        created_by: int,
        session_type: Optional[str] = None,
    ) -> tuple[AttendanceSession, bool]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO attendance_sessions(
                    schedule_id, date, status, opened_at, created_by, attendance_required, session_type
                )
                VALUES(%s,%s,%s,%s,%s,1,%s)
                """,
                (int(schedule_id), on_date, SessionStatus.ACTIVE.value, opened_at, int(created_by), session_type),
            )
            created = cur.rowcount == 1
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_sessions WHERE schedule_id=%s AND date=%s",
                (int(schedule_id), on_date),
            )
            return _row_to_session(fetchone(cur)), created

    def list_active(self) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_sessions WHERE status=%s ORDER BY date, session_id",
                (SessionStatus.ACTIVE.value,),
            )
            return [_row_to_session(r) for r in fetchall(cur)]

    def list_active_before(self, on_date: date) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_sessions WHERE status=%s AND date < %s ORDER BY date",
                (SessionStatus.ACTIVE.value, on_date),
            )
            return [_row_to_session(r) for r in fetchall(cur)]

    def lock_if_active(self, session_id: int, *, locked_at: datetime, locked_by: int, reason: str) -> bool:
        return compare_and_set(
            self._conn_factory,
            """
            UPDATE attendance_sessions
            SET status=%s, locked_at=%s, locked_by=%s, completion_reason=%s
            WHERE session_id=%s AND status=%s
            """,
            (SessionStatus.LOCKED.value, locked_at, int(locked_by), reason, int(session_id), SessionStatus.ACTIVE.value),
        )

    def delete_older_than(self, cutoff: date) -> int:
        return delete_before(self._conn_factory, "attendance_sessions", "date", cutoff)
