from __future__ import annotations

import logging
from datetime import date, datetime, time

from ..audit.service import AuditLogger
from ..common.datetime_utils import Clock, SystemClock, fmt_moment
from ..core.enums import AttendanceStatus
from ..core.results import JobResult
from ..notifications.service import NotificationDispatcher
from ..schedules.repository import ScheduleRepository
from ..sessions.repository import SessionRepository
from ..settings.service import SettingsService
from ..shifts.resolver import ShiftResolver
from ..shifts.window import roll_past
from ..users.repository import UserRepository
from .factory import AttendanceStrategyFactory
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceStatusEngine:
    """Timer-driven absence sweep and administrative status recompute."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        schedules: ScheduleRepository,
        users: UserRepository,
        settings: SettingsService,
        audit: AuditLogger,
        notifier: NotificationDispatcher,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        clock: Clock | None = None,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._schedules = schedules
        self._users = users
        self._settings = settings
        self._audit = audit
        self._notifier = notifier
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._clock = clock or SystemClock()

    def _employee_name(self, user_id: int) -> str:
        user = self._users.get_by_id(user_id)
        return user.full_name if user else f"User ID {user_id}"

    def absent_cutoff(self, session_date: date, time_in: time) -> datetime:
        shift_start = datetime.combine(session_date, time_in)
        return roll_past(shift_start, session_date, self._settings.get_time("auto_absent_time"))

    def mark_absent(self) -> JobResult:
        now = self._clock.now()
        result = JobResult(name="mark-absent")
        weekend_allowed = self._settings.get_bool("weekend_checkin")
        alerts = self._settings.get_bool("absent_alerts")

        sessions = self._sessions.list_active()
        if not sessions:
            logger.info("No active sessions found")
            return result.finish("No active sessions found.")

        for session in sessions:
            schedule = self._schedules.get_by_id(session.schedule_id)
            if schedule is None:
                logger.warning("Session %s has no schedule; skipping", session.session_id)
                continue
            if not weekend_allowed and not schedule.works_on(session.date):
                logger.info("Session %s falls on a non-working day; skipping", session.session_id)
                continue

            cutoff = self.absent_cutoff(session.date, schedule.time_in)
            if now < cutoff:
                logger.info("Session %s: not yet past cutoff %s", session.session_id, fmt_moment(cutoff))
                continue

            for record in self._attendance.list_pending_without_checkin(session.session_id):
                try:
                    if not self._attendance.mark_absent_if_pending(record.record_id):
                        # Checked in between our read and write.
                        result.skipped += 1
                        continue
                    result.affected += 1
                    self._audit.log(
                        "auto_mark_absent",
                        f"System automatically marked employee (User ID: {record.user_id}) as absent "
                        "- no check-in by cutoff time",
                        subject_type="AttendanceRecord",
                        subject_id=record.record_id,
                        before={"status": AttendanceStatus.PENDING.value},
                        after={"status": AttendanceStatus.ABSENT.value},
                    )
                    if alerts:
                        self._notifier.absent(self._employee_name(record.user_id), record_id=record.record_id)
                except Exception:
                    logger.exception("Failed to mark record %s absent", record.record_id)
                    result.failed += 1

        logger.info("Marked %d employee(s) absent", result.affected)
        return result.finish(f"Marked {result.affected} employees as absent.")

    def recalculate_status(self) -> JobResult:
        result = JobResult(name="recalculate-status")
        resolver = ShiftResolver(self._sessions, self._schedules)

        for record in self._attendance.list_with_time_in():
            try:
                resolved = resolver.resolve(record.session_id)
                if resolved is None:
                    logger.warning("Record %s has no session or schedule; skipping", record.record_id)
                    result.skipped += 1
                    continue
                _, schedule, window = resolved

                strategy = self._factory.for_checkin(now=record.time_in, window=window, schedule=schedule)
                decision = strategy.decide_checkin(now=record.time_in, window=window)
                status = record.status if record.status == AttendanceStatus.LEFT_EARLY else decision.status

                if status == record.status and decision.minutes_late == record.minutes_late:
                    continue

                if self._attendance.update_status_if_unchanged(
                    record.record_id,
                    expected=record.status,
                    status=status,
                    minutes_late=decision.minutes_late,
                ):
                    result.affected += 1
                    self._audit.log(
                        "recalculate_status",
                        f"System recalculated status for employee (User ID: {record.user_id}) "
                        f"from {record.status.value} to {status.value}",
                        subject_type="AttendanceRecord",
                        subject_id=record.record_id,
                        before={"status": record.status.value, "minutes_late": record.minutes_late},
                        after={"status": status.value, "minutes_late": decision.minutes_late},
                    )
                    logger.info(
                        "Record %s: %s/%d -> %s/%d",
                        record.record_id,
                        record.status.value,
                        record.minutes_late,
                        status.value,
                        decision.minutes_late,
                    )
                else:
                    result.skipped += 1
            except Exception:
                logger.exception("Error recalculating record %s", record.record_id)
                result.failed += 1

        return result.finish(f"Recalculation complete. Updated {result.affected} records.")
