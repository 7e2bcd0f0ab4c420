from datetime import datetime

import pytest

from attendance_engine.core.enums import NotificationKind
from attendance_engine.core.exceptions import ValidationError


@pytest.fixture
def checked_in(store, container, clock, open_session):
    clock.current = datetime(2026, 3, 2, 23, 0)
    return container.attendance_service.check_in(10)


def test_start_break_inside_window_mirrors_legacy_columns(store, container, clock, checked_in):
    clock.current = datetime(2026, 3, 3, 0, 5)

    brk = container.break_service.start_break(10, break_type="meal")

    assert brk.break_start == datetime(2026, 3, 3, 0, 5)
    assert brk.duration_limit == 60
    assert store.breaks.get_open_for_record(checked_in.record_id).break_id == brk.break_id
    assert store.attendance.get_by_id(checked_in.record_id).break_start == datetime(2026, 3, 3, 0, 5)
    assert store.audit.actions()[-1] == "start_break"


@pytest.mark.parametrize(
    "now, code",
    [
        (datetime(2026, 3, 2, 23, 59), "TOO_EARLY"),
        (datetime(2026, 3, 3, 1, 0), "BREAK_WINDOW_CLOSED"),
    ],
)
def test_start_break_outside_window(container, clock, checked_in, now, code):
    clock.current = now

    with pytest.raises(ValidationError) as exc:
        container.break_service.start_break(10)
    assert exc.value.code == code


def test_start_break_guards(store, container, clock, checked_in):
    clock.current = datetime(2026, 3, 3, 0, 10)
    with pytest.raises(ValidationError) as not_in:
        container.break_service.start_break(11)
    assert not_in.value.code == "NOT_CHECKED_IN"

    container.break_service.start_break(10)
    with pytest.raises(ValidationError) as twice:
        container.break_service.start_break(10)
    assert twice.value.code == "ALREADY_ON_BREAK"

    clock.current = datetime(2026, 3, 3, 0, 20)
    container.break_service.end_break(10)
    with pytest.raises(ValidationError) as limit:
        container.break_service.start_break(10)
    assert limit.value.code == "BREAK_LIMIT_REACHED"


def test_start_break_after_checkout(container, clock, checked_in):
    clock.current = datetime(2026, 3, 3, 0, 30)
    container.attendance_service.check_out(10)

    with pytest.raises(ValidationError) as exc:
        container.break_service.start_break(10)
    assert exc.value.code == "ALREADY_CHECKED_OUT"


def test_end_break_returns_duration(store, container, clock, checked_in):
    clock.current = datetime(2026, 3, 3, 0, 0)
    brk = container.break_service.start_break(10)
    clock.current = datetime(2026, 3, 3, 0, 45)

    assert container.break_service.end_break(10) == 45
    ended = store.breaks.breaks[brk.break_id]
    assert ended.duration_minutes == 45
    assert ended.penalty_minutes == 0
    assert store.attendance.get_by_id(checked_in.record_id).break_end == datetime(2026, 3, 3, 0, 45)
    assert store.notifications.sent == []


def test_overlong_break_alerts_and_penalizes(store, container, clock, checked_in):
    clock.current = datetime(2026, 3, 3, 0, 0)
    brk = container.break_service.start_break(10)
    clock.current = datetime(2026, 3, 3, 1, 40)

    assert container.break_service.end_break(10) == 100

    assert store.breaks.breaks[brk.break_id].penalty_minutes == 10
    assert store.attendance.get_by_id(checked_in.record_id).notes == "Break overtime penalty: 10 min deducted"
    assert [n.kind for n in store.notifications.sent] == [NotificationKind.BREAK_EXCEEDED]


def test_penalty_can_be_disabled(store, container, clock, checked_in):
    store.settings.set_value("break_penalty", "0")
    clock.current = datetime(2026, 3, 3, 0, 0)
    brk = container.break_service.start_break(10)
    clock.current = datetime(2026, 3, 3, 1, 40)

    container.break_service.end_break(10)

    assert store.breaks.breaks[brk.break_id].penalty_minutes == 0
    assert store.attendance.get_by_id(checked_in.record_id).notes is None


def test_end_break_without_one(container, clock, checked_in):
    clock.current = datetime(2026, 3, 3, 0, 30)

    with pytest.raises(ValidationError) as exc:
        container.break_service.end_break(10)
    assert exc.value.code == "NO_ACTIVE_BREAK"


def test_end_legacy_only_break(store, container, clock, checked_in):
    store.attendance.set_legacy_break(checked_in.record_id, break_start=datetime(2026, 3, 3, 0, 10))
    clock.current = datetime(2026, 3, 3, 0, 40)

    assert container.break_service.end_break(10) == 30
    assert store.attendance.get_by_id(checked_in.record_id).break_end == datetime(2026, 3, 3, 0, 40)
