from datetime import datetime, timedelta

import pytest

from attendance_engine.common.datetime_utils import (
    FixedClock,
    minutes_between,
    parse_moment,
    parse_time_of_day,
    subtract_months,
)


def test_fixed_clock_advances():
    clock = FixedClock(datetime(2026, 3, 2, 23, 0))
    clock.advance(timedelta(minutes=90))

    assert clock.now() == datetime(2026, 3, 3, 0, 30)


def test_minutes_between_truncates_seconds():
    assert minutes_between(datetime(2026, 3, 2, 23, 0), datetime(2026, 3, 2, 23, 16, 59)) == 16


@pytest.mark.parametrize(
    "moment, months, expected",
    [
        (datetime(2026, 3, 31, 10, 0), 1, datetime(2026, 2, 28, 10, 0)),
        (datetime(2026, 1, 15), 3, datetime(2025, 10, 15)),
        (datetime(2024, 2, 29), 12, datetime(2023, 2, 28)),
    ],
)
def test_subtract_months_clamps_day(moment, months, expected):
    assert subtract_months(moment, months) == expected


def test_parsers():
    assert parse_time_of_day("01:00").hour == 1
    assert parse_time_of_day("23:15:30").second == 30
    assert parse_moment("2026-03-03 01:00") == datetime(2026, 3, 3, 1, 0)
    with pytest.raises(ValueError):
        parse_time_of_day("1am")
