"""Shift window arithmetic.

Every component that turns a time-of-day into a concrete instant goes through
``roll_past`` so the overnight wrap is decided in exactly one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta


@dataclass(frozen=True)
class ShiftWindow:
    start: datetime
    end: datetime

    @property
    def is_overnight(self) -> bool:
        return self.end.date() > self.start.date()

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


def roll_past(anchor: datetime, on_date: date, time_of_day: time) -> datetime:
    """Combine ``on_date`` with ``time_of_day``; move to the next day unless it falls after ``anchor``.

    A time-of-day equal to the anchor's is treated as the following day, so a
    schedule with ``time_in == time_out`` spans 24 hours.
    """
    moment = datetime.combine(on_date, time_of_day)
    if moment <= anchor:
        moment += timedelta(days=1)
    return moment


def shift_window(time_in: time, time_out: time, on_date: date) -> ShiftWindow:
    start = datetime.combine(on_date, time_in)
    return ShiftWindow(start=start, end=roll_past(start, on_date, time_out))


def logical_date(now: datetime, boundary_hour: int) -> date:
    """Attendance day a wall-clock instant belongs to; before ``boundary_hour`` it is still yesterday."""
    if now.hour < int(boundary_hour):
        return now.date() - timedelta(days=1)
    return now.date()


def break_window(shift_begin: datetime, on_date: date, opens: time, closes: time) -> ShiftWindow:
    """Break window for a session, rolled past the shift start like the shift end is."""
    start = datetime.combine(on_date, opens)
    if start < shift_begin:
        start += timedelta(days=1)
    return ShiftWindow(start=start, end=roll_past(start, start.date(), closes))
