"""Constants and defaults.

Note: Keep policy constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

FULL_ATTENDANCE_MINUTES = 90
FULL_ATTENDANCE_MULTIPLIER = Decimal("1.2")

DEFAULT_REMINDER_INTERVALS = (30, 15, 5)
MOTIVATION_OFFSET_MINUTES = 15
DEADLINE_ALERT_OFFSET_MINUTES = 5

DEFAULT_MISSED_CHECKOUT_CUTOFF_MINUTES = 60
RECENTLY_ENDED_WINDOW_MINUTES = 30
DEFAULT_UPCOMING_DAYS = 30
DEFAULT_HISTORY_LIMIT = 50

STREAK_BUILDING_THRESHOLD = 5
MONTHLY_MOMENTUM_THRESHOLD = 3
