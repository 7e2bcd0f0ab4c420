from __future__ import annotations

import logging
from typing import Optional

from ..common.datetime_utils import Clock, SystemClock
from ..core.enums import NotificationKind
from ..users.repository import UserRepository
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Fan-out of in-app notifications to every active admin.

    Delivery problems are logged; callers never see them.
    """

    def __init__(self, notifications: NotificationRepository, users: UserRepository, *, clock: Clock | None = None):
        self._notifications = notifications
        self._users = users
        self._clock = clock or SystemClock()

    def notify_admins(self, kind: NotificationKind, message: str, *, subject_id: Optional[int] = None) -> int:
        sent = 0
        try:
            admins = self._users.list_admins()
        except Exception:
            logger.exception("Could not resolve notification recipients for %s", kind.value)
            return 0

        for admin in admins:
            try:
                self._notifications.add(
                    Notification(
                        user_id=admin.user_id,
                        kind=kind,
                        message=message,
                        subject_id=subject_id,
                        created_at=self._clock.now(),
                    )
                )
                sent += 1
            except Exception:
                logger.exception("Notification %s to admin %s failed", kind.value, admin.user_id)
        return sent

    def absent(self, employee_name: str, *, record_id: Optional[int] = None) -> int:
        return self.notify_admins(NotificationKind.ABSENT, f"{employee_name} was marked absent", subject_id=record_id)

    def late_arrival(self, employee_name: str, minutes_late: int, *, record_id: Optional[int] = None) -> int:
        return self.notify_admins(
            NotificationKind.LATE_ARRIVAL,
            f"{employee_name} checked in {minutes_late} minutes late",
            subject_id=record_id,
        )

    def break_exceeded(self, employee_name: str, minutes: int, limit: int, *, record_id: Optional[int] = None) -> int:
        return self.notify_admins(
            NotificationKind.BREAK_EXCEEDED,
            f"{employee_name} took a {minutes} minute break (limit {limit})",
            subject_id=record_id,
        )
