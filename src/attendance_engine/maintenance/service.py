from __future__ import annotations

import logging

from ..attendance.repository import AttendanceRepository
from ..audit.repository import AuditRepository
from ..audit.service import AuditLogger
from ..breaks.repository import BreakRepository
from ..common.datetime_utils import Clock, SystemClock, subtract_months
from ..core.results import JobResult
from ..notifications.repository import NotificationRepository
from ..sessions.repository import SessionRepository
from ..settings.service import SettingsService

logger = logging.getLogger(__name__)


class RetentionService:
    """Deletes attendance history older than the configured retention window."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        breaks: BreakRepository,
        notifications: NotificationRepository,
        audit_repo: AuditRepository,
        settings: SettingsService,
        audit: AuditLogger,
        *,
        clock: Clock | None = None,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._breaks = breaks
        self._notifications = notifications
        self._audit_repo = audit_repo
        self._settings = settings
        self._audit = audit
        self._clock = clock or SystemClock()

    def cleanup_data(self) -> JobResult:
        result = JobResult(name="cleanup-data")
        policy = self._settings.retention_policy()
        if policy.months is None:
            logger.info("Retention policy set to forever; skipping cleanup")
            return result.finish("Retention policy set to forever. Skipping cleanup.")

        cutoff = subtract_months(self._clock.now(), policy.months)
        logger.info("Cleaning up data older than %s (policy %s)", cutoff.date(), policy.value)

        # Breaks go first so the cascade from records does not hide their count.
        deleted = {
            "breaks": self._breaks.delete_older_than(cutoff.date()),
            "attendance records": self._attendance.delete_older_than(cutoff.date()),
            "sessions": self._sessions.delete_older_than(cutoff.date()),
            "notifications": self._notifications.delete_older_than(cutoff),
            "audit logs": self._audit_repo.delete_older_than(cutoff),
        }
        for label, count in deleted.items():
            logger.info("Deleted %d %s", count, label)
        result.affected = sum(deleted.values())

        self._audit.log(
            "system_cleanup",
            f"Auto-cleanup executed (Policy: {policy.value})",
            after={"cutoff": cutoff.date().isoformat(), **{k.replace(" ", "_"): v for k, v in deleted.items()}},
        )
        return result.finish(
            f"Deleted {result.affected} row(s) older than {cutoff.date().isoformat()}: "
            + ", ".join(f"{v} {k}" for k, v in deleted.items())
            + "."
        )
