from datetime import datetime, time

from attendance_engine.core.enums import AttendanceStatus, NotificationKind, SessionStatus

from fakes import ADMIN_ID


def _statuses(store):
    return {r.user_id: r.status for r in store.attendance.records.values()}


def test_nothing_happens_before_cutoff(store, container, clock, open_session):
    clock.current = datetime(2026, 3, 3, 0, 59)

    result = container.status_engine.mark_absent()

    assert result.ok
    assert result.affected == 0
    assert set(_statuses(store).values()) == {AttendanceStatus.PENDING}


def test_cutoff_marks_pending_absent_and_alerts(store, container, clock, open_session):
    clock.current = datetime(2026, 3, 2, 23, 5)
    container.attendance_service.check_in(10)
    clock.current = datetime(2026, 3, 3, 1, 0)

    result = container.status_engine.mark_absent()

    assert result.affected == 2
    assert _statuses(store) == {
        10: AttendanceStatus.PRESENT,
        11: AttendanceStatus.ABSENT,
        12: AttendanceStatus.ABSENT,
    }
    assert store.audit.actions().count("auto_mark_absent") == 2
    absent = [n for n in store.notifications.sent if n.kind == NotificationKind.ABSENT]
    assert len(absent) == 2
    assert {n.user_id for n in absent} == {ADMIN_ID}


def test_second_sweep_is_a_no_op(store, container, clock, open_session):
    clock.current = datetime(2026, 3, 3, 2, 0)
    container.status_engine.mark_absent()
    audit_count = len(store.audit.entries)

    again = container.status_engine.mark_absent()

    assert again.affected == 0
    assert len(store.audit.entries) == audit_count


def test_lost_race_is_counted_as_skipped(store, container, clock, open_session, monkeypatch):
    clock.current = datetime(2026, 3, 3, 1, 30)
    original = store.attendance.mark_absent_if_pending

    def checked_in_meanwhile(record_id):
        if store.attendance.records[record_id].user_id == 11:
            return False
        return original(record_id)

    monkeypatch.setattr(store.attendance, "mark_absent_if_pending", checked_in_meanwhile)

    result = container.status_engine.mark_absent()

    assert result.affected == 2
    assert result.skipped == 1
    assert store.attendance.get_for_user_and_date(11, open_session.date).status == AttendanceStatus.PENDING


def test_alerts_can_be_disabled(store, container, clock, open_session):
    store.settings.set_value("absent_alerts", "0")
    clock.current = datetime(2026, 3, 3, 1, 0)

    container.status_engine.mark_absent()

    assert store.notifications.sent == []


def test_custom_cutoff_setting(store, container, clock, open_session):
    store.settings.set_value("auto_absent_time", "03:00")
    clock.current = datetime(2026, 3, 3, 2, 0)

    assert container.status_engine.mark_absent().affected == 0
    assert container.status_engine.absent_cutoff(open_session.date, time(23, 0)) == datetime(2026, 3, 3, 3, 0)


def test_weekend_session_is_left_alone(store, container, clock):
    saturday = datetime(2026, 3, 7, 18, 0)
    session = store.sessions.add(
        schedule_id=1, date=saturday.date(), status=SessionStatus.ACTIVE, opened_at=saturday, created_by=ADMIN_ID
    )
    store.attendance.seed_pending(session_id=session.session_id, on_date=saturday.date(), user_ids=[10])
    clock.current = datetime(2026, 3, 8, 3, 0)

    assert container.status_engine.mark_absent().affected == 0

    store.settings.set_value("weekend_checkin", "1")
    assert container.status_engine.mark_absent().affected == 1


def test_no_active_sessions(container, clock):
    result = container.status_engine.mark_absent()

    assert result.ok
    assert "No active sessions" in result.summary
