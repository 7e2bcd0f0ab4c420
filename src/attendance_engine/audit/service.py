from __future__ import annotations

import hashlib
import json
import logging
import uuid
from dataclasses import replace
from typing import Any, Optional

from ..common.datetime_utils import Clock, SystemClock, fmt_moment
from ..core.enums import AuditSeverity, AuditStatus
from .model import AuditEntry, ChainReport
from .repository import AuditRepository

logger = logging.getLogger(__name__)

ACTION_SEVERITY: dict[str, AuditSeverity] = {
    "system_cleanup": AuditSeverity.CRITICAL,
    "update_attendance": AuditSeverity.MEDIUM,
    "auto_lock_session": AuditSeverity.MEDIUM,
    "auto_create_session": AuditSeverity.LOW,
    "auto_mark_absent": AuditSeverity.LOW,
    "auto_checkout": AuditSeverity.LOW,
    "auto_end_break": AuditSeverity.LOW,
    "recalculate_status": AuditSeverity.LOW,
    "recalculate_hours": AuditSeverity.LOW,
    "confirm_attendance": AuditSeverity.INFO,
    "check_out": AuditSeverity.INFO,
    "start_break": AuditSeverity.INFO,
    "end_break": AuditSeverity.INFO,
}


def compute_hash(entry: AuditEntry) -> str:
    payload = {
        "action": entry.action,
        "description": entry.description,
        "actor_user_id": entry.actor_user_id,
        "subject_type": entry.subject_type,
        "subject_id": entry.subject_id,
        "before": entry.before,
        "after": entry.after,
        "status": entry.status.value,
        "severity": entry.severity.value,
        "transaction_id": entry.transaction_id,
        "previous_hash": entry.previous_hash,
        "created_at": fmt_moment(entry.created_at),
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def resolve_severity(action: str, status: AuditStatus, severity: Optional[AuditSeverity] = None) -> AuditSeverity:
    resolved = severity or ACTION_SEVERITY.get(action, AuditSeverity.INFO)
    if status == AuditStatus.FAILED and resolved == AuditSeverity.INFO:
        return AuditSeverity.LOW
    return resolved


class AuditLogger:
    """Appends hash-chained audit entries.

    Auditing is best-effort: a failed write is logged and ``log`` returns None,
    the state change it describes stays committed.
    """

    def __init__(self, audit: AuditRepository, *, clock: Clock | None = None):
        self._audit = audit
        self._clock = clock or SystemClock()

    def log(
        self,
        action: str,
        description: str,
        *,
        actor_user_id: Optional[int] = None,
        subject_type: Optional[str] = None,
        subject_id: Optional[int] = None,
        before: Optional[dict[str, Any]] = None,
        after: Optional[dict[str, Any]] = None,
        status: AuditStatus = AuditStatus.SUCCESS,
        severity: Optional[AuditSeverity] = None,
    ) -> Optional[AuditEntry]:
        try:
            last = self._audit.last()
            entry = AuditEntry(
                action=action,
                description=description,
                actor_user_id=actor_user_id,
                subject_type=subject_type,
                subject_id=subject_id,
                before=before,
                after=after,
                status=status,
                severity=resolve_severity(action, status, severity),
                transaction_id=str(uuid.uuid4()),
                previous_hash=last.hash if last else None,
                created_at=self._clock.now(),
                hash="",
            )
            entry = replace(entry, hash=compute_hash(entry))
            audit_id = self._audit.append(entry)
            return replace(entry, audit_id=audit_id)
        except Exception:
            logger.warning("Audit write failed for action=%s subject=%s:%s", action, subject_type, subject_id, exc_info=True)
            return None

    def verify_chain(self) -> ChainReport:
        """Walk the log in id order; report the first entry whose hash or link is wrong.

        The oldest surviving entry anchors the chain, so retention cleanup does
        not count as tampering.
        """
        checked = 0
        previous: Optional[AuditEntry] = None
        for entry in self._audit.iter_in_order():
            checked += 1
            if compute_hash(entry) != entry.hash:
                return ChainReport(checked=checked, broken_at=entry.audit_id, reason="hash mismatch")
            if previous is not None and entry.previous_hash != previous.hash:
                return ChainReport(checked=checked, broken_at=entry.audit_id, reason="previous_hash does not match")
            previous = entry
        return ChainReport(checked=checked)
