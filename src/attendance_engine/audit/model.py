from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import AuditSeverity, AuditStatus


@dataclass(frozen=True)
class AuditEntry:
    """Append-only audit trail entry.

    ``hash`` covers every other field, including ``previous_hash``, so editing
    or removing an entry in the middle of the log breaks the chain.
    """

    action: str
    description: str
    transaction_id: str
    created_at: datetime
    hash: str
    actor_user_id: Optional[int] = None
    subject_type: Optional[str] = None
    subject_id: Optional[int] = None
    before: Optional[dict[str, Any]] = None
    after: Optional[dict[str, Any]] = None
    status: AuditStatus = AuditStatus.SUCCESS
    severity: AuditSeverity = AuditSeverity.INFO
    previous_hash: Optional[str] = None
    audit_id: Optional[int] = None


@dataclass(frozen=True)
class ChainReport:
    checked: int
    broken_at: Optional[int] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.broken_at is None
