from __future__ import annotations

from typing import Optional

from ..schedules.model import Schedule
from ..schedules.repository import ScheduleRepository
from ..sessions.model import AttendanceSession
from ..sessions.repository import SessionRepository
from .window import ShiftWindow


class ShiftResolver:
    """Resolves the session and schedule behind a record, memoized for one job run."""

    def __init__(self, sessions: SessionRepository, schedules: ScheduleRepository):
        self._sessions = sessions
        self._schedules = schedules
        self._session_cache: dict[int, Optional[AttendanceSession]] = {}
        self._schedule_cache: dict[int, Optional[Schedule]] = {}

    def session(self, session_id: Optional[int]) -> Optional[AttendanceSession]:
        if session_id is None:
            return None
        if session_id not in self._session_cache:
            self._session_cache[session_id] = self._sessions.get_by_id(session_id)
        return self._session_cache[session_id]

    def schedule(self, schedule_id: int) -> Optional[Schedule]:
        if schedule_id not in self._schedule_cache:
            self._schedule_cache[schedule_id] = self._schedules.get_by_id(schedule_id)
        return self._schedule_cache[schedule_id]

    def resolve(self, session_id: Optional[int]) -> Optional[tuple[AttendanceSession, Schedule, ShiftWindow]]:
        session = self.session(session_id)
        if session is None:
            return None
        schedule = self.schedule(session.schedule_id)
        if schedule is None:
            return None
        return session, schedule, schedule.window_on(session.date)
