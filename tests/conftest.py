from __future__ import annotations

from datetime import datetime, time

import pytest

from attendance_engine.common.datetime_utils import FixedClock
from attendance_engine.core.enums import Role, SessionStatus
from attendance_engine.schedules.model import Schedule
from attendance_engine.users.model import User
from fakes import ADMIN_ID, EMPLOYEE_IDS, Store


@pytest.fixture
def fixed_now() -> datetime:
    # Monday, before the night shift opens.
    return datetime(2026, 3, 2, 18, 0, 0)


@pytest.fixture
def clock(fixed_now):
    return FixedClock(fixed_now)


@pytest.fixture
def night_schedule() -> Schedule:
    return Schedule(
        schedule_id=1,
        name="Night Shift",
        time_in=time(23, 0),
        break_time=time(0, 0),
        time_out=time(7, 0),
        grace_period_minutes=15,
        late_threshold_minutes=30,
        is_overnight=True,
    )


@pytest.fixture
def store(night_schedule) -> Store:
    s = Store()
    s.users.add(User(user_id=ADMIN_ID, full_name="Ada Admin", role=Role.ADMIN))
    for uid in EMPLOYEE_IDS:
        s.users.add(User(user_id=uid, full_name=f"Employee {uid}", role=Role.EMPLOYEE))
    s.users.add(User(user_id=99, full_name="Former Employee", role=Role.EMPLOYEE, is_active=False))
    s.schedules.add(night_schedule)
    return s


@pytest.fixture
def container(store, clock):
    return store.container(clock)


@pytest.fixture
def open_session(store, fixed_now):
    """Today's active night session with pending records for every active employee."""
    session = store.sessions.add(
        schedule_id=1,
        date=fixed_now.date(),
        status=SessionStatus.ACTIVE,
        opened_at=fixed_now,
        created_by=ADMIN_ID,
    )
    store.attendance.seed_pending(session_id=session.session_id, on_date=fixed_now.date(), user_ids=EMPLOYEE_IDS)
    return session
