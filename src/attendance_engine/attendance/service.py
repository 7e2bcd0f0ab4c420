from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional

from ..audit.service import AuditLogger
from ..breaks.repository import BreakRepository
from ..common.datetime_utils import Clock, SystemClock, fmt_moment, minutes_between
from ..core.constants import CHECKIN_CLOSES_AFTER, CHECKIN_OPENS_BEFORE
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..notifications.service import NotificationDispatcher
from ..payroll.overtime import OvertimeDecision, OvertimePolicy
from ..payroll.service import HoursService
from ..schedules.repository import ScheduleRepository
from ..sessions.repository import SessionRepository
from ..settings.service import SettingsService
from ..shifts.resolver import ShiftResolver
from ..shifts.window import logical_date
from ..users.repository import UserRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class AttendanceService:
    """Synchronous employee actions: check-in, check-out and admin edits."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        breaks: BreakRepository,
        sessions: SessionRepository,
        schedules: ScheduleRepository,
        users: UserRepository,
        settings: SettingsService,
        audit: AuditLogger,
        notifier: NotificationDispatcher,
        hours: HoursService,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        clock: Clock | None = None,
    ):
        self._attendance = attendance
        self._breaks = breaks
        self._sessions = sessions
        self._schedules = schedules
        self._users = users
        self._settings = settings
        self._audit = audit
        self._notifier = notifier
        self._hours = hours
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._clock = clock or SystemClock()

    def logical_today(self, now: Optional[datetime] = None) -> date:
        now = now or self._clock.now()
        return logical_date(now, self._settings.get_int("shift_boundary_hour"))

    def get_today_record(self, user_id: int) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_user_and_date(user_id, self.logical_today())

    def check_in(self, user_id: int) -> AttendanceRecord:
        now = self._clock.now()
        today = self.logical_today(now)

        user = self._users.get_by_id(user_id)
        if user is None:
            raise ValidationError("Employee does not exist", code="RECORD_NOT_FOUND")

        session = self._sessions.get_active_for_date(today)
        schedule = self._schedules.get_by_id(session.schedule_id) if session else None
        if session is None or schedule is None:
            raise ValidationError("No active attendance session for today", code="NO_SESSION")

        if not schedule.works_on(session.date) and not self._settings.get_bool("weekend_checkin"):
            raise ValidationError("There is no shift on this day", code="NO_WEEKEND_SHIFT")

        window = schedule.window_on(session.date)
        opens_at = window.start - CHECKIN_OPENS_BEFORE
        closes_at = window.start + CHECKIN_CLOSES_AFTER
        if now < opens_at:
            raise ValidationError(f"Check-in opens at {opens_at:%H:%M}", code="TOO_EARLY")
        if now > closes_at:
            raise ValidationError(f"Check-in closed at {closes_at:%H:%M}", code="TOO_LATE")

        existing = self._attendance.get_for_user_and_date(user_id, today)
        if existing is not None and (existing.time_in is not None or not existing.status.accepts_checkin):
            if existing.is_open:
                raise ValidationError("You are currently checked in", code="CURRENTLY_CHECKED_IN")
            raise ValidationError("You have already checked in today", code="ALREADY_CHECKED_IN_TODAY")

        strategy = self._factory.for_checkin(now=now, window=window, schedule=schedule)
        decision = strategy.decide_checkin(now=now, window=window)

        if existing is not None:
            if not self._attendance.check_in_if_open(
                existing.record_id, time_in=now, status=decision.status, minutes_late=decision.minutes_late
            ):
                raise ValidationError("You have already checked in today", code="ALREADY_CHECKED_IN_TODAY")
            record_id = existing.record_id
            before_status = existing.status.value
        else:
            record_id = self._attendance.create_checked_in(
                session_id=session.session_id,
                user_id=user_id,
                on_date=today,
                time_in=now,
                status=decision.status,
                minutes_late=decision.minutes_late,
            )
            if record_id is None:
                raise ValidationError("You have already checked in today", code="ALREADY_CHECKED_IN_TODAY")
            before_status = None

        self._audit.log(
            "confirm_attendance",
            f"{user.full_name} confirmed attendance ({decision.status.value})",
            actor_user_id=user_id,
            subject_type="AttendanceRecord",
            subject_id=record_id,
            before={"status": before_status},
            after={
                "status": decision.status.value,
                "time_in": fmt_moment(now),
                "minutes_late": decision.minutes_late,
            },
        )
        if decision.status == AttendanceStatus.LATE and self._settings.get_bool("late_alerts"):
            self._notifier.late_arrival(user.full_name, decision.minutes_late, record_id=record_id)

        return self._attendance.get_by_id(record_id)

    def check_out(self, user_id: int) -> AttendanceRecord:
        now = self._clock.now()
        record = self._attendance.get_for_user_and_date(user_id, self.logical_today(now))
        if record is None or record.time_in is None:
            raise ValidationError("Cannot check out without checking in first", code="NOT_CHECKED_IN")
        if record.time_out is not None:
            raise ValidationError("Already checked out", code="ALREADY_CHECKED_OUT")

        break_end = record.break_end
        open_break = self._breaks.get_open_for_record(record.record_id)
        if open_break is not None:
            if self._breaks.end_if_open(
                open_break.break_id,
                break_end=now,
                duration_minutes=minutes_between(open_break.break_start, now),
            ):
                self._attendance.set_legacy_break(record.record_id, break_end=now)
                break_end = now
        elif record.on_legacy_break:
            if self._attendance.end_legacy_break_if_open(record.record_id, break_end=now):
                break_end = now

        status = record.status
        overtime = OvertimeDecision()
        resolved = ShiftResolver(self._sessions, self._schedules).resolve(record.session_id)
        if resolved is not None:
            _, _, window = resolved
            strategy = self._factory.for_checkout(now=now, window=window, current_status=record.status)
            status = strategy.decide_checkout(now=now, window=window, current=record.status).status
            overtime = OvertimePolicy.from_settings(self._settings).evaluate(time_out=now, shift_end=window.end)

        hours = self._hours.hours_for(replace(record, time_out=now, break_end=break_end))
        if not self._attendance.check_out_if_open(
            record.record_id,
            time_out=now,
            status=status,
            hours_worked=hours,
            overtime_minutes=overtime.minutes,
            overtime_status=overtime.status,
        ):
            raise ValidationError("Already checked out", code="ALREADY_CHECKED_OUT")

        self._audit.log(
            "check_out",
            f"Employee (User ID: {user_id}) checked out",
            actor_user_id=user_id,
            subject_type="AttendanceRecord",
            subject_id=record.record_id,
            before={"time_out": None, "status": record.status.value},
            after={
                "time_out": fmt_moment(now),
                "status": status.value,
                "hours_worked": hours,
                "overtime_minutes": overtime.minutes,
            },
        )
        return self._attendance.get_by_id(record.record_id)

    def admin_update(
        self,
        record_id: int,
        *,
        actor_id: int,
        reason: str,
        status: Optional[AttendanceStatus] = _UNSET,
        time_in: Optional[datetime] = _UNSET,
        time_out: Optional[datetime] = _UNSET,
        break_start: Optional[datetime] = _UNSET,
        break_end: Optional[datetime] = _UNSET,
    ) -> AttendanceRecord:
        """Manual correction by an administrator.

        Only the fields passed are changed; ``None`` clears a time. Hours are
        recomputed whenever both times are present afterwards. A new ``time_in``
        without an explicit ``status`` re-derives status and lateness the way
        the status recompute job does; ``left_early`` is kept.
        """
        if not reason or len(reason.strip()) < 5:
            raise ValidationError("A reason of at least 5 characters is required", code="INVALID")

        record = self._attendance.get_by_id(record_id)
        if record is None:
            raise ValidationError("Attendance record not found", code="RECORD_NOT_FOUND")

        requested = {
            "status": status,
            "time_in": time_in,
            "time_out": time_out,
            "break_start": break_start,
            "break_end": break_end,
        }
        changes = {k: v for k, v in requested.items() if v is not _UNSET}
        if not changes:
            return record

        updated = replace(record, **changes)
        audited = list(changes)
        if "time_in" in changes and "status" not in changes and updated.time_in is not None:
            derived = self._rederive_checkin(updated)
            if derived is not updated:
                updated = derived
                audited += ["status", "minutes_late"]
        if updated.time_in is not None and updated.time_out is not None:
            updated = replace(updated, hours_worked=self._hours.hours_for(updated))
        self._attendance.save_manual(updated)

        def _show(value: Any) -> Any:
            if isinstance(value, AttendanceStatus):
                return value.value
            if isinstance(value, datetime):
                return fmt_moment(value)
            return value

        described = ", ".join(f"{k} to {_show(v)}" for k, v in changes.items())
        self._audit.log(
            "update_attendance",
            f"Admin (User ID: {actor_id}) updated record: {described}. Reason: {reason.strip()}",
            actor_user_id=actor_id,
            subject_type="AttendanceRecord",
            subject_id=record.record_id,
            before={k: _show(getattr(record, k)) for k in audited},
            after={k: _show(getattr(updated, k)) for k in audited},
        )
        logger.info("Record %s updated by admin %s: %s", record.record_id, actor_id, described)
        return updated

    def _rederive_checkin(self, record: AttendanceRecord) -> AttendanceRecord:
        resolved = ShiftResolver(self._sessions, self._schedules).resolve(record.session_id)
        if resolved is None:
            logger.warning("Record %s has no session or schedule; status left as is", record.record_id)
            return record
        _, schedule, window = resolved
        strategy = self._factory.for_checkin(now=record.time_in, window=window, schedule=schedule)
        decision = strategy.decide_checkin(now=record.time_in, window=window)
        status = record.status if record.status == AttendanceStatus.LEFT_EARLY else decision.status
        return replace(record, status=status, minutes_late=decision.minutes_late)
