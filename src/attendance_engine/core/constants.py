"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time, timedelta

DEFAULT_ABSENT_CUTOFF = time(1, 0)
AUTO_CHECKOUT_GRACE = timedelta(hours=1)
AUTO_CHECKOUT_NOTE = "Auto checked out by system"
NOTE_SEPARATOR = " | "

DEFAULT_BREAK_LIMIT_MINUTES = 60
LEGACY_BREAK_LIMIT_MINUTES = 60

# Check-in window relative to shift start.
CHECKIN_OPENS_BEFORE = timedelta(hours=5)
CHECKIN_CLOSES_AFTER = timedelta(hours=2, minutes=30)

HOURS_EPSILON = 0.01
DEFAULT_SHIFT_BOUNDARY_HOUR = 14

# ISO weekday numbers (Monday=1).
DEFAULT_WORKING_DAYS = frozenset({1, 2, 3, 4, 5})

# key -> (type, default). Values mirror the seeded `settings` table.
SETTING_DEFAULTS: dict[str, tuple[str, str]] = {
    "auto_checkout": ("boolean", "1"),
    "weekend_checkin": ("boolean", "0"),
    "absent_alerts": ("boolean", "1"),
    "late_alerts": ("boolean", "1"),
    "break_alerts": ("boolean", "1"),
    "break_penalty": ("boolean", "1"),
    "auto_absent_time": ("time", "01:00"),
    "shift_boundary_hour": ("integer", str(DEFAULT_SHIFT_BOUNDARY_HOUR)),
    "retention_policy": ("string", "1year"),
    "max_breaks": ("integer", "1"),
    "max_break_duration": ("integer", str(DEFAULT_BREAK_LIMIT_MINUTES)),
    "break_duration": ("integer", "90"),
    "break_start_window": ("time", "00:00"),
    "break_end_window": ("time", "01:00"),
    "allow_overtime": ("boolean", "0"),
    "min_overtime_minutes": ("integer", "60"),
    "ot_rounding": ("string", "none"),
    "require_ot_approval": ("boolean", "1"),
}
