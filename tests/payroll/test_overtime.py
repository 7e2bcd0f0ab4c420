from datetime import datetime

import pytest

from attendance_engine.core.enums import OvertimeStatus
from attendance_engine.core.exceptions import ConfigurationError
from attendance_engine.payroll.overtime import OvertimePolicy

SHIFT_END = datetime(2026, 3, 3, 7, 0)


def test_disabled_policy_never_records_overtime():
    decision = OvertimePolicy(enabled=False).evaluate(time_out=datetime(2026, 3, 3, 10, 0), shift_end=SHIFT_END)

    assert decision.minutes == 0
    assert decision.status == OvertimeStatus.NONE


def test_below_minimum_is_ignored():
    policy = OvertimePolicy(enabled=True, min_minutes=60)

    assert policy.evaluate(time_out=datetime(2026, 3, 3, 7, 59), shift_end=SHIFT_END).minutes == 0
    assert policy.evaluate(time_out=datetime(2026, 3, 3, 8, 0), shift_end=SHIFT_END).minutes == 60


@pytest.mark.parametrize(
    "rounding, expected",
    [("none", 107), ("down_15", 105), ("down_30", 90), ("down_60", 60)],
)
def test_rounding_rules(rounding, expected):
    policy = OvertimePolicy(enabled=True, min_minutes=30, rounding=rounding)

    assert policy.evaluate(time_out=datetime(2026, 3, 3, 8, 47), shift_end=SHIFT_END).minutes == expected


def test_approval_flag_sets_status():
    late_out = datetime(2026, 3, 3, 9, 0)

    assert OvertimePolicy(enabled=True).evaluate(time_out=late_out, shift_end=SHIFT_END).status == OvertimeStatus.PENDING
    assert (
        OvertimePolicy(enabled=True, require_approval=False).evaluate(time_out=late_out, shift_end=SHIFT_END).status
        == OvertimeStatus.APPROVED
    )


def test_unknown_rounding_rule_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        OvertimePolicy(enabled=True, rounding="nearest_15").evaluate(
            time_out=datetime(2026, 3, 3, 9, 0), shift_end=SHIFT_END
        )


def test_policy_reads_settings(store, container):
    store.settings.set_value("allow_overtime", "1")
    store.settings.set_value("min_overtime_minutes", "30")
    store.settings.set_value("ot_rounding", "down_15")
    store.settings.set_value("require_ot_approval", "0")

    policy = OvertimePolicy.from_settings(container.settings_service)

    assert policy == OvertimePolicy(enabled=True, min_minutes=30, rounding="down_15", require_approval=False)
