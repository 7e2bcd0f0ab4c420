from datetime import datetime

from attendance_engine.payroll.calculator.standard_calculator import (
    StandardHoursCalculator,
    resolve_break_minutes,
    span_minutes,
)


def test_standard_calculator_subtracts_break():
    calc = StandardHoursCalculator()
    assert calc.worked_minutes(
        time_in=datetime(2025, 1, 1, 8, 0), time_out=datetime(2025, 1, 1, 17, 0), break_minutes=60
    ) == 8 * 60


def test_overnight_shift_with_ninety_minute_break():
    calc = StandardHoursCalculator()

    assert calc.hours_worked(
        time_in=datetime(2026, 3, 2, 22, 51), time_out=datetime(2026, 3, 3, 7, 5), break_minutes=90
    ) == 6.73
    assert calc.hours_worked(
        time_in=datetime(2026, 3, 2, 22, 53), time_out=datetime(2026, 3, 3, 7, 5), break_minutes=90
    ) == 6.70


def test_time_out_before_time_in_wraps_to_next_day():
    assert span_minutes(datetime(2026, 3, 2, 23, 0), datetime(2026, 3, 2, 7, 0)) == 8 * 60


def test_never_negative():
    calc = StandardHoursCalculator()
    assert calc.worked_minutes(
        time_in=datetime(2026, 3, 2, 23, 0), time_out=datetime(2026, 3, 2, 23, 30), break_minutes=60
    ) == 0


def test_normalized_breaks_win_over_legacy_pair():
    legacy = (datetime(2026, 3, 3, 0, 0), datetime(2026, 3, 3, 0, 40))

    assert resolve_break_minutes(25, *legacy) == 25
    assert resolve_break_minutes(0, *legacy) == 40
    assert resolve_break_minutes(0, legacy[0], None) == 0
