"""Encouragement lines shown next to upcoming events."""

from __future__ import annotations

from ..core.constants import MONTHLY_MOMENTUM_THRESHOLD, STREAK_BUILDING_THRESHOLD
from ..streaks.model import AttendanceStreak

STREAK_BUILDING = (
    "You're on fire! Keep that attendance streak alive!",
    "Consistency builds champions, one event at a time!",
    "Your dedication is showing! Keep attending events!",
)

POINTS_CLOSE = (
    "You're so close to your next AET milestone!",
    "Just a few more points to unlock your next achievement!",
    "Your progress is accelerating, keep it up!",
)

SKILL_DEVELOPMENT = (
    "New skills await at this event!",
    "Expand your agricultural knowledge and network!",
    "Transform learning into leadership opportunities!",
)


def encouragement_for(event_id: str, streak: AttendanceStreak) -> str:
    if streak.current_streak >= STREAK_BUILDING_THRESHOLD:
        options = STREAK_BUILDING
    elif streak.this_month_count >= MONTHLY_MOMENTUM_THRESHOLD:
        options = POINTS_CLOSE
    else:
        options = SKILL_DEVELOPMENT
    # Same event, same line: keeps the list stable between refreshes.
    return options[sum(map(ord, event_id)) % len(options)]
