from __future__ import annotations

from typing import Any, Optional

from ..core.enums import ScheduleStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import Schedule, parse_working_days
from .repository import ScheduleRepository

_COLUMNS = """
    schedule_id, name, time_in, break_time, time_out, grace_period_minutes,
    late_threshold_minutes, is_overnight, working_days, status
"""


def _row_to_schedule(r: dict[str, Any]) -> Schedule:
    return Schedule(
        schedule_id=int(r["schedule_id"]),
        name=r["name"],
        time_in=normalize_mysql_time(r["time_in"]),
        time_out=normalize_mysql_time(r["time_out"]),
        break_time=normalize_mysql_time(r.get("break_time")),
        grace_period_minutes=int(r.get("grace_period_minutes") or 0),
        late_threshold_minutes=int(r.get("late_threshold_minutes") or 0),
        is_overnight=bool(r.get("is_overnight")),
        working_days=parse_working_days(r.get("working_days")),
        status=ScheduleStatus(r["status"]),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active(self) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM schedules WHERE status=%s ORDER BY schedule_id LIMIT 1",
                (ScheduleStatus.ACTIVE.value,),
            )
            r = fetchone(cur)
            return _row_to_schedule(r) if r else None

    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM schedules WHERE schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return _row_to_schedule(r) if r else None
