from datetime import datetime

from attendance_engine.core.constants import AUTO_CHECKOUT_NOTE


def _checked_in(container, clock, user_id=10):
    clock.current = datetime(2026, 3, 2, 23, 0)
    return container.attendance_service.check_in(user_id)


def test_closes_at_nominal_shift_end(store, container, clock, open_session):
    record = _checked_in(container, clock)
    clock.current = datetime(2026, 3, 3, 8, 1)

    result = container.checkout_engine.auto_checkout()

    closed = store.attendance.get_by_id(record.record_id)
    assert result.affected == 1
    assert closed.time_out == datetime(2026, 3, 3, 7, 0)
    assert closed.auto_checkout is True
    assert closed.notes == AUTO_CHECKOUT_NOTE
    assert store.audit.actions()[-1] == "auto_checkout"


def test_waits_an_hour_past_shift_end(store, container, clock, open_session):
    record = _checked_in(container, clock)
    clock.current = datetime(2026, 3, 3, 8, 0)

    assert container.checkout_engine.auto_checkout().affected == 0
    assert store.attendance.get_by_id(record.record_id).time_out is None


def test_existing_notes_are_kept(store, container, clock, open_session):
    record = _checked_in(container, clock)
    store.attendance.update_notes(record.record_id, "Came in via side gate")
    clock.current = datetime(2026, 3, 3, 9, 0)

    container.checkout_engine.auto_checkout()

    assert store.attendance.get_by_id(record.record_id).notes == f"Came in via side gate | {AUTO_CHECKOUT_NOTE}"


def test_disabled_by_setting(store, container, clock, open_session):
    record = _checked_in(container, clock)
    store.settings.set_value("auto_checkout", "0")
    clock.current = datetime(2026, 3, 3, 12, 0)

    result = container.checkout_engine.auto_checkout()

    assert result.ok
    assert "disabled" in result.summary
    assert store.attendance.get_by_id(record.record_id).time_out is None


def test_already_checked_out_is_untouched(store, container, clock, open_session):
    record = _checked_in(container, clock)
    clock.current = datetime(2026, 3, 3, 7, 10)
    container.attendance_service.check_out(10)
    clock.current = datetime(2026, 3, 3, 9, 0)

    assert container.checkout_engine.auto_checkout().affected == 0
    assert store.attendance.get_by_id(record.record_id).auto_checkout is False
