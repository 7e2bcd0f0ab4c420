from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .model import Notification


class NotificationRepository(Protocol):
    def add(self, notification: Notification) -> int:
        raise NotImplementedError

    def delete_older_than(self, cutoff: datetime) -> int:
        raise NotImplementedError
