import logging
from dataclasses import replace
from datetime import datetime, timedelta

from attendance_engine.audit.service import AuditLogger, compute_hash, resolve_severity
from attendance_engine.core.enums import AuditSeverity, AuditStatus

from fakes import InMemoryAudit


def _logger(clock):
    repo = InMemoryAudit()
    return repo, AuditLogger(repo, clock=clock)


def test_entries_are_chained(clock):
    repo, audit = _logger(clock)

    first = audit.log("confirm_attendance", "Employee checked in", actor_user_id=10)
    clock.advance(timedelta(minutes=1))
    second = audit.log("check_out", "Employee checked out", actor_user_id=10)

    assert first.previous_hash is None
    assert second.previous_hash == first.hash
    assert first.hash == compute_hash(replace(first, audit_id=None))
    assert audit.verify_chain().ok
    assert audit.verify_chain().checked == 2


def test_edited_entry_is_detected(clock):
    repo, audit = _logger(clock)
    audit.log("confirm_attendance", "Employee checked in", actor_user_id=10)
    audit.log("update_attendance", "Admin changed status", actor_user_id=1, after={"status": "present"})
    audit.log("check_out", "Employee checked out", actor_user_id=10)

    repo.entries[1] = replace(repo.entries[1], after={"status": "excused"})
    report = audit.verify_chain()

    assert not report.ok
    assert report.broken_at == repo.entries[1].audit_id
    assert report.reason == "hash mismatch"


def test_removed_entry_breaks_the_link(clock):
    repo, audit = _logger(clock)
    for n in range(3):
        audit.log("auto_mark_absent", f"Marked {n}")

    del repo.entries[1]
    report = audit.verify_chain()

    assert report.broken_at == 3
    assert "previous_hash" in report.reason


def test_chain_survives_retention_cleanup(clock):
    repo, audit = _logger(clock)
    audit.log("auto_checkout", "Old entry")
    clock.advance(timedelta(days=400))
    audit.log("auto_checkout", "Recent entry")

    repo.delete_older_than(clock.now() - timedelta(days=365))

    assert audit.verify_chain().ok


def test_write_failure_is_logged_not_raised(clock, caplog):
    repo, audit = _logger(clock)
    repo.fail = True

    with caplog.at_level(logging.WARNING, logger="attendance_engine.audit.service"):
        assert audit.log("auto_checkout", "Could not persist", subject_type="AttendanceRecord", subject_id=5) is None

    assert "Audit write failed" in caplog.text
    assert repo.entries == []


def test_severity_follows_action_and_status():
    assert resolve_severity("system_cleanup", AuditStatus.SUCCESS) == AuditSeverity.CRITICAL
    assert resolve_severity("update_attendance", AuditStatus.SUCCESS) == AuditSeverity.MEDIUM
    assert resolve_severity("auto_mark_absent", AuditStatus.SUCCESS) == AuditSeverity.LOW
    assert resolve_severity("check_out", AuditStatus.SUCCESS) == AuditSeverity.INFO
    assert resolve_severity("check_out", AuditStatus.FAILED) == AuditSeverity.LOW
    assert resolve_severity("check_out", AuditStatus.SUCCESS, AuditSeverity.HIGH) == AuditSeverity.HIGH


def test_created_at_comes_from_clock(clock):
    _, audit = _logger(clock)
    clock.current = datetime(2026, 3, 3, 1, 0)

    assert audit.log("auto_mark_absent", "x").created_at == datetime(2026, 3, 3, 1, 0)
