from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from ..attendance.model import AttendanceRecord, append_note
from ..attendance.repository import AttendanceRepository
from ..audit.service import AuditLogger
from ..common.datetime_utils import Clock, SystemClock, fmt_moment, minutes_between
from ..core.constants import DEFAULT_BREAK_LIMIT_MINUTES, LEGACY_BREAK_LIMIT_MINUTES, NOTE_SEPARATOR
from ..core.exceptions import ValidationError
from ..core.results import JobResult
from ..notifications.service import NotificationDispatcher
from ..schedules.repository import ScheduleRepository
from ..sessions.repository import SessionRepository
from ..settings.service import SettingsService
from ..shifts.resolver import ShiftResolver
from ..shifts.window import break_window, logical_date
from ..users.repository import UserRepository
from .model import EmployeeBreak
from .repository import BreakRepository

logger = logging.getLogger(__name__)


class BreakService:
    """Employee-initiated break start/end."""

    def __init__(
        self,
        breaks: BreakRepository,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        schedules: ScheduleRepository,
        users: UserRepository,
        settings: SettingsService,
        audit: AuditLogger,
        notifier: NotificationDispatcher,
        *,
        clock: Clock | None = None,
    ):
        self._breaks = breaks
        self._attendance = attendance
        self._sessions = sessions
        self._schedules = schedules
        self._users = users
        self._settings = settings
        self._audit = audit
        self._notifier = notifier
        self._clock = clock or SystemClock()

    def _todays_record(self, user_id: int) -> AttendanceRecord:
        day = logical_date(self._clock.now(), self._settings.get_int("shift_boundary_hour"))
        record = self._attendance.get_for_user_and_date(user_id, day)
        if record is None or record.time_in is None:
            raise ValidationError("You have not checked in today", code="NOT_CHECKED_IN")
        return record

    def start_break(self, user_id: int, *, break_type: Optional[str] = None) -> EmployeeBreak:
        now = self._clock.now()
        record = self._todays_record(user_id)
        if record.time_out is not None:
            raise ValidationError("Cannot start break after check out", code="ALREADY_CHECKED_OUT")

        resolved = ShiftResolver(self._sessions, self._schedules).resolve(record.session_id)
        if resolved is None:
            raise ValidationError("No attendance session for this record", code="NO_SESSION")
        session, _, shift = resolved

        window = break_window(
            shift.start,
            session.date,
            self._settings.get_time("break_start_window"),
            self._settings.get_time("break_end_window"),
        )
        if now < window.start:
            raise ValidationError(f"Break time opens at {window.start:%H:%M}", code="TOO_EARLY")
        if now >= window.end:
            raise ValidationError(f"Break time closed at {window.end:%H:%M}", code="BREAK_WINDOW_CLOSED")

        if self._breaks.get_open_for_record(record.record_id) is not None or record.on_legacy_break:
            raise ValidationError("Already on break", code="ALREADY_ON_BREAK")

        max_breaks = self._settings.get_int("max_breaks")
        if self._breaks.count_for_record(record.record_id) >= max_breaks:
            raise ValidationError(
                f"You have already used your allowed breaks ({max_breaks}) for today.",
                code="BREAK_LIMIT_REACHED",
            )

        limit = self._settings.get_int("max_break_duration", DEFAULT_BREAK_LIMIT_MINUTES)
        break_id = self._breaks.create(
            attendance_id=record.record_id,
            user_id=user_id,
            break_date=record.attendance_date,
            break_start=now,
            break_type=break_type,
            duration_limit=limit,
        )
        self._attendance.set_legacy_break(record.record_id, break_start=now)
        self._audit.log(
            "start_break",
            f"Employee (User ID: {user_id}) started {break_type or 'a'} break",
            actor_user_id=user_id,
            subject_type="EmployeeBreak",
            subject_id=break_id,
            after={"break_start": fmt_moment(now), "duration_limit": limit},
        )
        return EmployeeBreak(
            break_id=break_id,
            attendance_id=record.record_id,
            user_id=user_id,
            break_date=record.attendance_date,
            break_start=now,
            break_type=break_type,
            duration_limit=limit,
        )

    def end_break(self, user_id: int) -> int:
        """Close the caller's open break; returns its duration in minutes."""
        now = self._clock.now()
        record = self._todays_record(user_id)
        open_break = self._breaks.get_open_for_record(record.record_id)

        if open_break is None:
            if record.on_legacy_break and self._attendance.end_legacy_break_if_open(record.record_id, break_end=now):
                return minutes_between(record.break_start, now)
            raise ValidationError("No active break", code="NO_ACTIVE_BREAK")

        duration = minutes_between(open_break.break_start, now)
        limit = self._settings.get_int("break_duration")
        excess = max(duration - limit, 0)
        penalty = excess if excess and self._settings.get_bool("break_penalty") else 0

        if not self._breaks.end_if_open(
            open_break.break_id, break_end=now, duration_minutes=duration, penalty_minutes=penalty
        ):
            raise ValidationError("Break was already ended", code="NO_ACTIVE_BREAK")
        self._attendance.set_legacy_break(record.record_id, break_end=now)

        if excess and self._settings.get_bool("break_alerts"):
            user = self._users.get_by_id(user_id)
            name = user.full_name if user else f"User ID {user_id}"
            self._notifier.break_exceeded(name, duration, limit, record_id=record.record_id)
        if penalty:
            note = f"Break overtime penalty: {penalty} min deducted"
            self._attendance.update_notes(record.record_id, append_note(record.notes, note, separator=NOTE_SEPARATOR))

        self._audit.log(
            "end_break",
            f"Employee (User ID: {user_id}) ended break after {duration} minutes",
            actor_user_id=user_id,
            subject_type="EmployeeBreak",
            subject_id=open_break.break_id,
            before={"break_end": None},
            after={"break_end": fmt_moment(now), "duration_minutes": duration, "penalty_minutes": penalty},
        )
        return duration


class BreakEnforcer:
    """Auto-ends breaks that ran past their limit, in both break representations."""

    def __init__(
        self,
        breaks: BreakRepository,
        attendance: AttendanceRepository,
        audit: AuditLogger,
        *,
        clock: Clock | None = None,
    ):
        self._breaks = breaks
        self._attendance = attendance
        self._audit = audit
        self._clock = clock or SystemClock()

    def end_expired_breaks(self) -> JobResult:
        now = self._clock.now()
        result = JobResult(name="end-expired-breaks")

        for brk in self._breaks.list_open():
            try:
                limit = DEFAULT_BREAK_LIMIT_MINUTES if brk.duration_limit is None else int(brk.duration_limit)
                max_end = brk.break_start + timedelta(minutes=limit)
                if now < max_end:
                    continue
                if not self._breaks.end_if_open(brk.break_id, break_end=max_end, duration_minutes=limit):
                    result.skipped += 1
                    continue
                self._attendance.set_legacy_break(brk.attendance_id, break_end=max_end)
                result.affected += 1
                kind = f"{brk.break_type} " if brk.break_type else ""
                self._audit.log(
                    "auto_end_break",
                    f"System automatically ended {kind}break for employee "
                    f"(User ID: {brk.user_id}) after {limit} minute limit",
                    subject_type="EmployeeBreak",
                    subject_id=brk.break_id,
                    before={"break_end": None},
                    after={"break_end": fmt_moment(max_end)},
                )
                logger.info("Auto-ended break %s (type=%s, limit=%d)", brk.break_id, brk.break_type, limit)
            except Exception:
                logger.exception("Failed to auto-end break %s", brk.break_id)
                result.failed += 1

        # Records whose break is tracked in the breaks table belong to the pass above.
        still_open = {b.attendance_id for b in self._breaks.list_open()}
        for record in self._attendance.list_open_legacy_breaks():
            if record.record_id in still_open:
                continue
            try:
                auto_end = record.break_start + timedelta(minutes=LEGACY_BREAK_LIMIT_MINUTES)
                if now < auto_end:
                    continue
                if not self._attendance.end_legacy_break_if_open(record.record_id, break_end=auto_end):
                    result.skipped += 1
                    continue
                result.affected += 1
                self._audit.log(
                    "auto_end_break",
                    f"System automatically ended break for employee (User ID: {record.user_id}) "
                    "after 1 hour limit (legacy)",
                    subject_type="AttendanceRecord",
                    subject_id=record.record_id,
                    before={"break_end": None},
                    after={"break_end": fmt_moment(auto_end)},
                )
                logger.info("Auto-ended legacy break for record %s", record.record_id)
            except Exception:
                logger.exception("Failed to auto-end legacy break on record %s", record.record_id)
                result.failed += 1

        return result.finish(f"Auto-ended {result.affected} expired breaks.")
