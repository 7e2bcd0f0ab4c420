from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import NotificationKind


@dataclass(frozen=True)
class Notification:
    user_id: int
    kind: NotificationKind
    message: str
    created_at: datetime
    subject_id: Optional[int] = None
    read_at: Optional[datetime] = None
    notification_id: Optional[int] = None
