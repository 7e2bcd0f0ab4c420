from __future__ import annotations

import logging

from ..audit.service import AuditLogger
from ..common.datetime_utils import Clock, SystemClock, fmt_moment
from ..core.constants import AUTO_CHECKOUT_GRACE, AUTO_CHECKOUT_NOTE, NOTE_SEPARATOR
from ..core.results import JobResult
from ..schedules.repository import ScheduleRepository
from ..sessions.repository import SessionRepository
from ..settings.service import SettingsService
from ..shifts.resolver import ShiftResolver
from .model import append_note
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AutoCheckoutEngine:
    """Closes records nobody checked out, at the nominal shift end."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        schedules: ScheduleRepository,
        settings: SettingsService,
        audit: AuditLogger,
        *,
        clock: Clock | None = None,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._schedules = schedules
        self._settings = settings
        self._audit = audit
        self._clock = clock or SystemClock()

    def auto_checkout(self) -> JobResult:
        result = JobResult(name="auto-checkout")
        if not self._settings.get_bool("auto_checkout"):
            logger.info("Auto checkout is disabled in settings")
            return result.finish("Auto checkout is disabled in settings.")

        now = self._clock.now()
        resolver = ShiftResolver(self._sessions, self._schedules)
        logger.info("Running auto checkout at %s", fmt_moment(now))

        for record in self._attendance.list_open_checked_in():
            try:
                resolved = resolver.resolve(record.session_id)
                if resolved is None:
                    result.skipped += 1
                    continue
                _, _, window = resolved
                if now <= window.end + AUTO_CHECKOUT_GRACE:
                    continue

                notes = append_note(record.notes, AUTO_CHECKOUT_NOTE, separator=NOTE_SEPARATOR)
                if not self._attendance.auto_checkout_if_open(record.record_id, time_out=window.end, notes=notes):
                    result.skipped += 1
                    continue

                result.affected += 1
                logger.info("Auto checkout: user %s for session %s", record.user_id, record.session_id)
                self._audit.log(
                    "auto_checkout",
                    f"System automatically checked out employee (User ID: {record.user_id}) at shift end",
                    subject_type="AttendanceRecord",
                    subject_id=record.record_id,
                    before={"time_out": None, "auto_checkout": False},
                    after={"time_out": fmt_moment(window.end), "auto_checkout": True},
                )
            except Exception:
                logger.exception("Auto checkout failed for record %s", record.record_id)
                result.failed += 1

        return result.finish(f"Auto checked out {result.affected} employee(s).")
