from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles relevant to the engine."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Persisted status of one employee's attendance day."""

    PENDING = "pending"
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    EXCUSED = "excused"
    LEFT_EARLY = "left_early"

    @property
    def accepts_checkin(self) -> bool:
        return self in (AttendanceStatus.PENDING, AttendanceStatus.ABSENT)


class SessionStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    LOCKED = "locked"
    COMPLETED = "completed"


class ScheduleStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class OvertimeStatus(str, Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AuditStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    WARNING = "warning"


class AuditSeverity(str, Enum):
    INFO = "info"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class NotificationKind(str, Enum):
    ABSENT = "absent"
    LATE_ARRIVAL = "late_arrival"
    BREAK_EXCEEDED = "break_exceeded"


class RetentionPolicy(str, Enum):
    ONE_MONTH = "1month"
    THREE_MONTHS = "3months"
    SIX_MONTHS = "6months"
    ONE_YEAR = "1year"
    FOREVER = "forever"

    @property
    def months(self) -> int | None:
        """Retention window in months, None when data is kept forever."""
        return {
            RetentionPolicy.ONE_MONTH: 1,
            RetentionPolicy.THREE_MONTHS: 3,
            RetentionPolicy.SIX_MONTHS: 6,
            RetentionPolicy.ONE_YEAR: 12,
            RetentionPolicy.FOREVER: None,
        }[self]
