from datetime import datetime


def _checked_in_record(container, clock):
    clock.current = datetime(2026, 3, 2, 23, 0)
    return container.attendance_service.check_in(10)


def test_expired_break_ends_at_its_limit(store, container, clock, open_session):
    record = _checked_in_record(container, clock)
    clock.current = datetime(2026, 3, 3, 0, 0)
    brk = container.break_service.start_break(10)
    clock.current = datetime(2026, 3, 3, 1, 17)

    result = container.break_enforcer.end_expired_breaks()

    ended = store.breaks.breaks[brk.break_id]
    assert result.affected == 1
    assert ended.break_end == datetime(2026, 3, 3, 1, 0)
    assert ended.duration_minutes == 60
    assert store.attendance.get_by_id(record.record_id).break_end == datetime(2026, 3, 3, 1, 0)
    assert store.audit.actions()[-1] == "auto_end_break"


def test_running_break_is_left_open(store, container, clock, open_session):
    _checked_in_record(container, clock)
    clock.current = datetime(2026, 3, 3, 0, 0)
    brk = container.break_service.start_break(10)
    clock.current = datetime(2026, 3, 3, 0, 59)

    assert container.break_enforcer.end_expired_breaks().affected == 0
    assert store.breaks.breaks[brk.break_id].is_open


def test_legacy_break_is_ended_after_an_hour(store, container, clock, open_session):
    record = _checked_in_record(container, clock)
    store.attendance.set_legacy_break(record.record_id, break_start=datetime(2026, 3, 3, 0, 10))
    clock.current = datetime(2026, 3, 3, 1, 30)

    result = container.break_enforcer.end_expired_breaks()

    assert result.affected == 1
    assert store.attendance.get_by_id(record.record_id).break_end == datetime(2026, 3, 3, 1, 10)
    assert store.audit.entries[-1].description.endswith("(legacy)")


def test_legacy_pass_skips_records_with_open_normalized_break(store, container, clock, open_session):
    record = _checked_in_record(container, clock)
    store.breaks.add(
        attendance_id=record.record_id,
        user_id=10,
        break_date=record.attendance_date,
        break_start=datetime(2026, 3, 3, 0, 0),
        duration_limit=120,
    )
    store.attendance.set_legacy_break(record.record_id, break_start=datetime(2026, 3, 3, 0, 0))
    clock.current = datetime(2026, 3, 3, 1, 30)

    result = container.break_enforcer.end_expired_breaks()

    assert result.affected == 0
    assert store.attendance.get_by_id(record.record_id).break_end is None


def test_zero_minute_limit_is_honored(store, container, clock, open_session):
    record = _checked_in_record(container, clock)
    brk = store.breaks.add(
        attendance_id=record.record_id,
        user_id=10,
        break_date=record.attendance_date,
        break_start=datetime(2026, 3, 3, 0, 0),
        duration_limit=0,
    )
    clock.current = datetime(2026, 3, 3, 0, 30)

    result = container.break_enforcer.end_expired_breaks()

    ended = store.breaks.breaks[brk.break_id]
    assert result.affected == 1
    assert ended.break_end == datetime(2026, 3, 3, 0, 0)
    assert ended.duration_minutes == 0
