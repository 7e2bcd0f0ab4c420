from __future__ import annotations

import logging

from ..attendance.repository import AttendanceRepository
from ..audit.service import AuditLogger
from ..common.datetime_utils import Clock, SystemClock, fmt_moment
from ..core.enums import SessionStatus
from ..core.exceptions import PreconditionError
from ..core.results import JobResult
from ..schedules.repository import ScheduleRepository
from ..settings.service import SettingsService
from ..users.repository import UserRepository
from .model import AttendanceSession
from .repository import SessionRepository

logger = logging.getLogger(__name__)


def _session_snapshot(session: AttendanceSession) -> dict:
    return {
        "session_id": session.session_id,
        "schedule_id": session.schedule_id,
        "date": session.date.isoformat(),
        "status": session.status.value,
        "opened_at": fmt_moment(session.opened_at),
        "created_by": session.created_by,
    }


class SessionLifecycleService:
    """Opens today's session for the operative schedule and locks the stale ones."""

    def __init__(
        self,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository,
        users: UserRepository,
        settings: SettingsService,
        audit: AuditLogger,
        *,
        clock: Clock | None = None,
    ):
        self._sessions = sessions
        self._attendance = attendance
        self._schedules = schedules
        self._users = users
        self._settings = settings
        self._audit = audit
        self._clock = clock or SystemClock()

    def reset_daily_session(self) -> JobResult:
        """Create today's session and seed pending records; safe to re-run.

        Raises PreconditionError when there is no active schedule or no admin
        account to attribute the session to. Returns the number of pending
        records inserted as ``affected``.
        """
        now = self._clock.now()
        today = now.date()
        result = JobResult(name="reset-daily-session")

        schedule = self._schedules.get_active()
        if schedule is None:
            raise PreconditionError("No active schedule found. Please create a schedule first.")

        if not schedule.works_on(today) and not self._settings.get_bool("weekend_checkin"):
            logger.info("%s is not a working day for schedule %s; skipping", today.strftime("%A"), schedule.name)
            return result.finish(f"{today.isoformat()} is not a working day for {schedule.name}. Nothing to do.")

        admin = self._users.get_first_admin()
        if admin is None:
            raise PreconditionError("No admin user found. Cannot create session.")

        existing = self._sessions.get_for_schedule_and_date(schedule.schedule_id, today)
        if existing is not None:
            # Resume a run that died between session creation and record seeding.
            employees = self._users.list_active_employees()
            inserted = self._attendance.seed_pending(
                session_id=existing.session_id,
                on_date=today,
                user_ids=[e.user_id for e in employees],
            )
            result.affected = inserted
            result.skipped = len(employees) - inserted
            logger.info(
                "Session %s already exists for %s; topped up %d pending record(s)",
                existing.session_id,
                today,
                inserted,
            )
            return result.finish(
                f"Session already exists for {today.isoformat()} (ID {existing.session_id}); "
                f"{inserted} missing record(s) added."
            )

        for stale in self._sessions.list_active_before(today):
            if not self._sessions.lock_if_active(
                stale.session_id, locked_at=now, locked_by=admin.user_id, reason="daily reset"
            ):
                logger.info("Session %s was already locked by another actor", stale.session_id)
                continue
            self._audit.log(
                "auto_lock_session",
                f"System automatically locked session for {stale.date.isoformat()} (daily reset)",
                subject_type="AttendanceSession",
                subject_id=stale.session_id,
                before={"status": SessionStatus.ACTIVE.value},
                after={"status": SessionStatus.LOCKED.value},
            )
            logger.info("Locked previous session %s (%s)", stale.session_id, stale.date)

        session, created = self._sessions.create_if_absent(
            schedule_id=schedule.schedule_id,
            on_date=today,
            opened_at=now,
            created_by=admin.user_id,
        )
        employees = self._users.list_active_employees()
        inserted = self._attendance.seed_pending(
            session_id=session.session_id,
            on_date=today,
            user_ids=[e.user_id for e in employees],
        )
        result.affected = inserted
        result.skipped = len(employees) - inserted

        if created:
            self._audit.log(
                "auto_create_session",
                f"System automatically created attendance session for {today.isoformat()} "
                f"with {inserted} employees (daily reset)",
                subject_type="AttendanceSession",
                subject_id=session.session_id,
                after=_session_snapshot(session),
            )
        logger.info("Session %s for %s ready with %d new pending record(s)", session.session_id, today, inserted)
        return result.finish(f"Created session ID {session.session_id} for {today.isoformat()} with {inserted} employees.")
