from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.checkout_service import AutoCheckoutEngine
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .attendance.status_service import AttendanceStatusEngine
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.repository import AuditRepository
from .audit.service import AuditLogger
from .breaks.mysql_break_repository import MySQLBreakRepository
from .breaks.repository import BreakRepository
from .breaks.service import BreakEnforcer, BreakService
from .common.datetime_utils import Clock, SystemClock
from .database.connection import DBConfig, DatabaseConnection
from .maintenance.service import RetentionService
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationDispatcher
from .payroll.service import HoursService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionLifecycleService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .settings.service import SettingsService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    clock: Clock

    users_repo: UserRepository
    schedules_repo: ScheduleRepository
    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository
    breaks_repo: BreakRepository
    audit_repo: AuditRepository
    notifications_repo: NotificationRepository
    settings_repo: SettingsRepository

    settings_service: SettingsService
    audit_logger: AuditLogger
    notifier: NotificationDispatcher
    hours_service: HoursService
    session_service: SessionLifecycleService
    status_engine: AttendanceStatusEngine
    checkout_engine: AutoCheckoutEngine
    break_service: BreakService
    break_enforcer: BreakEnforcer
    attendance_service: AttendanceService
    retention_service: RetentionService

    def with_clock(self, clock: Clock) -> "Container":
        """Same repositories, services re-wired against another clock (used by CLI replays)."""
        return build_services(
            users_repo=self.users_repo,
            schedules_repo=self.schedules_repo,
            sessions_repo=self.sessions_repo,
            attendance_repo=self.attendance_repo,
            breaks_repo=self.breaks_repo,
            audit_repo=self.audit_repo,
            notifications_repo=self.notifications_repo,
            settings_repo=self.settings_repo,
            clock=clock,
            conn=self.conn,
        )


def build_services(
    *,
    users_repo: UserRepository,
    schedules_repo: ScheduleRepository,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceRepository,
    breaks_repo: BreakRepository,
    audit_repo: AuditRepository,
    notifications_repo: NotificationRepository,
    settings_repo: SettingsRepository,
    clock: Clock | None = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL in production, fakes in tests)."""
    clock = clock or SystemClock()

    settings_service = SettingsService(settings_repo)
    audit_logger = AuditLogger(audit_repo, clock=clock)
    notifier = NotificationDispatcher(notifications_repo, users_repo, clock=clock)
    hours_service = HoursService(attendance_repo, breaks_repo, audit_logger)
    strategy_factory = AttendanceStrategyFactory()

    session_service = SessionLifecycleService(
        sessions_repo,
        attendance_repo,
        schedules_repo,
        users_repo,
        settings_service,
        audit_logger,
        clock=clock,
    )
    status_engine = AttendanceStatusEngine(
        attendance_repo,
        sessions_repo,
        schedules_repo,
        users_repo,
        settings_service,
        audit_logger,
        notifier,
        strategy_factory=strategy_factory,
        clock=clock,
    )
    checkout_engine = AutoCheckoutEngine(
        attendance_repo,
        sessions_repo,
        schedules_repo,
        settings_service,
        audit_logger,
        clock=clock,
    )
    break_service = BreakService(
        breaks_repo,
        attendance_repo,
        sessions_repo,
        schedules_repo,
        users_repo,
        settings_service,
        audit_logger,
        notifier,
        clock=clock,
    )
    break_enforcer = BreakEnforcer(breaks_repo, attendance_repo, audit_logger, clock=clock)
    attendance_service = AttendanceService(
        attendance_repo,
        breaks_repo,
        sessions_repo,
        schedules_repo,
        users_repo,
        settings_service,
        audit_logger,
        notifier,
        hours_service,
        strategy_factory=strategy_factory,
        clock=clock,
    )
    retention_service = RetentionService(
        attendance_repo,
        sessions_repo,
        breaks_repo,
        notifications_repo,
        audit_repo,
        settings_service,
        audit_logger,
        clock=clock,
    )

    return Container(
        conn=conn,
        clock=clock,
        users_repo=users_repo,
        schedules_repo=schedules_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        breaks_repo=breaks_repo,
        audit_repo=audit_repo,
        notifications_repo=notifications_repo,
        settings_repo=settings_repo,
        settings_service=settings_service,
        audit_logger=audit_logger,
        notifier=notifier,
        hours_service=hours_service,
        session_service=session_service,
        status_engine=status_engine,
        checkout_engine=checkout_engine,
        break_service=break_service,
        break_enforcer=break_enforcer,
        attendance_service=attendance_service,
        retention_service=retention_service,
    )


def build_container(*, db_config: dict, clock: Clock | None = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return build_services(
        users_repo=MySQLUserRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        breaks_repo=MySQLBreakRepository(conn),
        audit_repo=MySQLAuditRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        clock=clock,
        conn=conn,
    )
