from __future__ import annotations

from datetime import datetime

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, delete_before
from .model import Notification
from .repository import NotificationRepository


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, notification: Notification) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(user_id, kind, message, subject_id, created_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    int(notification.user_id),
                    notification.kind.value,
                    notification.message,
                    notification.subject_id,
                    notification.created_at,
                ),
            )
            return int(cur.lastrowid)

    def delete_older_than(self, cutoff: datetime) -> int:
        return delete_before(self._conn_factory, "notifications", "created_at", cutoff)
