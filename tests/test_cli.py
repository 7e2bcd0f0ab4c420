from dataclasses import replace

import pytest

from attendance_engine.core.enums import AttendanceStatus
from attendance_engine.main import create_app
from fakes import Store


@pytest.fixture
def app(store, clock, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=store.container(clock))


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def test_reset_then_mark_absent_by_replayed_time(store, runner):
    opened = runner.invoke(args=["attendance", "reset-daily-session", "--at", "2026-03-02 18:00"])
    assert opened.exit_code == 0, opened.output
    assert "[reset-daily-session]" in opened.output

    early = runner.invoke(args=["attendance", "mark-absent", "--at", "2026-03-03 00:59"])
    assert early.exit_code == 0
    assert "affected=0" in early.output

    swept = runner.invoke(args=["attendance", "mark-absent", "--at", "2026-03-03 01:00"])
    assert swept.exit_code == 0
    assert "affected=3" in swept.output
    assert {r.status for r in store.attendance.records.values()} == {AttendanceStatus.ABSENT}


def test_missing_schedule_is_fatal(clock, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=Store().container(clock))

    result = app.test_cli_runner().invoke(args=["attendance", "reset-daily-session"])

    assert result.exit_code == 1


def test_bad_at_value_is_rejected(runner):
    result = runner.invoke(args=["attendance", "auto-checkout", "--at", "yesterday"])

    assert result.exit_code == 2


def test_verify_audit_reports_tampering(store, runner):
    runner.invoke(args=["attendance", "reset-daily-session", "--at", "2026-03-02 18:00"])
    assert runner.invoke(args=["attendance", "verify-audit"]).exit_code == 0

    store.audit.entries[0] = replace(store.audit.entries[0], description="edited")

    assert runner.invoke(args=["attendance", "verify-audit"]).exit_code == 1


def test_init_db_needs_a_connection(runner):
    assert runner.invoke(args=["attendance", "init-db"]).exit_code == 1
