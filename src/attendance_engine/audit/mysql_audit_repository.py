from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

from ..core.enums import AuditSeverity, AuditStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, delete_before, dump_json, fetchall, fetchone, load_json
from .model import AuditEntry
from .repository import AuditRepository

_COLUMNS = """
    audit_id, action, description, actor_user_id, subject_type, subject_id,
    before_values, after_values, status, severity, transaction_id, hash,
    previous_hash, created_at
"""


def _row_to_entry(r: dict[str, Any]) -> AuditEntry:
    return AuditEntry(
        audit_id=int(r["audit_id"]),
        action=r["action"],
        description=r["description"],
        actor_user_id=r.get("actor_user_id"),
        subject_type=r.get("subject_type"),
        subject_id=r.get("subject_id"),
        before=load_json(r.get("before_values")),
        after=load_json(r.get("after_values")),
        status=AuditStatus(r["status"]),
        severity=AuditSeverity(r["severity"]),
        transaction_id=r["transaction_id"],
        hash=r["hash"],
        previous_hash=r.get("previous_hash"),
        created_at=r["created_at"],
    )


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def last(self) -> Optional[AuditEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM audit_logs ORDER BY audit_id DESC LIMIT 1")
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def append(self, entry: AuditEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(
                    action, description, actor_user_id, subject_type, subject_id,
                    before_values, after_values, status, severity, transaction_id,
                    hash, previous_hash, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.action,
                    entry.description,
                    entry.actor_user_id,
                    entry.subject_type,
                    entry.subject_id,
                    dump_json(entry.before),
                    dump_json(entry.after),
                    entry.status.value,
                    entry.severity.value,
                    entry.transaction_id,
                    entry.hash,
                    entry.previous_hash,
                    entry.created_at,
                ),
            )
            return int(cur.lastrowid)

    def iter_in_order(self) -> Iterable[AuditEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM audit_logs ORDER BY audit_id")
            return [_row_to_entry(r) for r in fetchall(cur)]

    def delete_older_than(self, cutoff: datetime) -> int:
        return delete_before(self._conn_factory, "audit_logs", "created_at", cutoff)
