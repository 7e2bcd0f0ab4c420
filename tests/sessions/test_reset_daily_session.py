from collections import Counter
from dataclasses import replace
from datetime import date, datetime

import pytest

from attendance_engine.core.enums import AttendanceStatus, ScheduleStatus, SessionStatus
from attendance_engine.core.exceptions import PreconditionError

from fakes import ADMIN_ID, EMPLOYEE_IDS


def test_creates_session_and_pending_records(store, container, fixed_now):
    result = container.session_service.reset_daily_session()

    assert result.ok
    assert result.affected == len(EMPLOYEE_IDS)
    sessions = list(store.sessions.sessions.values())
    assert len(sessions) == 1
    assert sessions[0].status == SessionStatus.ACTIVE
    assert sessions[0].opened_at == fixed_now
    assert sessions[0].created_by == ADMIN_ID
    assert {r.user_id for r in store.attendance.records.values()} == set(EMPLOYEE_IDS)
    assert all(r.status == AttendanceStatus.PENDING for r in store.attendance.records.values())
    assert store.audit.actions() == ["auto_create_session"]


def test_running_twice_creates_one_session_and_no_duplicates(store, container):
    container.session_service.reset_daily_session()
    second = container.session_service.reset_daily_session()

    assert second.ok
    assert second.affected == 0
    assert len(store.sessions.sessions) == 1
    keys = Counter((r.user_id, r.attendance_date) for r in store.attendance.records.values())
    assert max(keys.values()) == 1
    assert store.audit.actions() == ["auto_create_session"]


def test_resumes_partial_run_by_topping_up_records(store, container, fixed_now):
    session = store.sessions.add(
        schedule_id=1, date=fixed_now.date(), status=SessionStatus.ACTIVE, opened_at=fixed_now, created_by=ADMIN_ID
    )
    store.attendance.add(session_id=session.session_id, user_id=10, attendance_date=fixed_now.date())

    result = container.session_service.reset_daily_session()

    assert result.affected == 2
    assert result.skipped == 1
    assert len(store.attendance.records) == len(EMPLOYEE_IDS)
    assert len(store.sessions.sessions) == 1


def test_locks_stale_active_sessions(store, container):
    stale = store.sessions.add(schedule_id=1, date=date(2026, 2, 27), status=SessionStatus.ACTIVE)

    container.session_service.reset_daily_session()

    locked = store.sessions.get_by_id(stale.session_id)
    assert locked.status == SessionStatus.LOCKED
    assert locked.locked_by == ADMIN_ID
    lock_entry = store.audit.entries[0]
    assert lock_entry.action == "auto_lock_session"
    assert lock_entry.before == {"status": "active"}
    assert lock_entry.after == {"status": "locked"}


def test_skips_non_working_day(store, clock):
    clock.current = datetime(2026, 3, 7, 18, 0)  # Saturday
    result = store.container(clock).session_service.reset_daily_session()

    assert result.ok
    assert store.sessions.sessions == {}


def test_weekend_setting_overrides_cadence(store, clock):
    clock.current = datetime(2026, 3, 7, 18, 0)
    store.settings.set_value("weekend_checkin", "1")

    result = store.container(clock).session_service.reset_daily_session()

    assert result.affected == len(EMPLOYEE_IDS)


def test_custom_cadence_is_honored(store, clock, night_schedule):
    store.schedules.add(replace(night_schedule, working_days=frozenset({6})))
    clock.current = datetime(2026, 3, 7, 18, 0)

    assert store.container(clock).session_service.reset_daily_session().affected == len(EMPLOYEE_IDS)


def test_no_active_schedule_is_fatal(store, container, night_schedule):
    store.schedules.add(replace(night_schedule, status=ScheduleStatus.INACTIVE))

    with pytest.raises(PreconditionError):
        container.session_service.reset_daily_session()
    assert store.sessions.sessions == {}


def test_no_admin_is_fatal_before_any_mutation(store, container):
    stale = store.sessions.add(schedule_id=1, date=date(2026, 2, 27), status=SessionStatus.ACTIVE)
    del store.users.users[ADMIN_ID]

    with pytest.raises(PreconditionError):
        container.session_service.reset_daily_session()
    assert store.sessions.get_by_id(stale.session_id).status == SessionStatus.ACTIVE
    assert store.audit.entries == []
