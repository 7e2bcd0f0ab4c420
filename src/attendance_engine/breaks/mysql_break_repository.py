from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import compare_and_set, db_cursor, delete_before, fetchall, fetchone
from .model import EmployeeBreak
from .repository import BreakRepository

_COLUMNS = """
    break_id, attendance_id, user_id, break_date, break_type, duration_limit,
    break_start, break_end, duration_minutes, penalty_minutes
"""


def _row_to_break(r: dict[str, Any]) -> EmployeeBreak:
    return EmployeeBreak(
        break_id=int(r["break_id"]),
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        break_date=r["break_date"],
        break_type=r.get("break_type"),
        duration_limit=r.get("duration_limit"),
        break_start=r["break_start"],
        break_end=r.get("break_end"),
        duration_minutes=int(r.get("duration_minutes") or 0),
        penalty_minutes=int(r.get("penalty_minutes") or 0),
    )


class MySQLBreakRepository(BreakRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_open_for_record(self, attendance_id: int) -> Optional[EmployeeBreak]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM breaks
                WHERE attendance_id=%s AND break_end IS NULL
                ORDER BY break_start DESC LIMIT 1
                """,
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _row_to_break(r) if r else None

    def list_open(self) -> Sequence[EmployeeBreak]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM breaks WHERE break_end IS NULL ORDER BY break_start")
            return [_row_to_break(r) for r in fetchall(cur)]

    def count_for_record(self, attendance_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM breaks WHERE attendance_id=%s", (int(attendance_id),))
            return int(fetchone(cur)["n"])

    def sum_minutes_for_record(self, attendance_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COALESCE(SUM(duration_minutes), 0) AS total FROM breaks WHERE attendance_id=%s",
                (int(attendance_id),),
            )
            return int(fetchone(cur)["total"])

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO breaks(attendance_id, user_id, break_date, break_type, duration_limit, break_start)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(attendance_id), int(user_id), break_date, break_type, int(duration_limit), break_start),
            )
            return int(cur.lastrowid)

    def end_if_open(self, break_id: int, *, break_end: datetime, duration_minutes: int, penalty_minutes: int = 0) -> bool:
        return compare_and_set(
            self._conn_factory,
            """
            UPDATE breaks
            SET break_end=%s, duration_minutes=%s, penalty_minutes=%s
            WHERE break_id=%s AND break_end IS NULL
            """,
            (break_end, int(duration_minutes), int(penalty_minutes), int(break_id)),
        )

    def delete_older_than(self, cutoff: date) -> int:
        return delete_before(self._conn_factory, "breaks", "break_date", cutoff)
