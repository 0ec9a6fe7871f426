from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from decimal import Decimal

from .numbers import round_half_up


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def elapsed_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between two instants, rounded half-up, never negative."""
    seconds = Decimal(str((end - start).total_seconds()))
    return max(0, round_half_up(seconds / 60))


def week_start(value: date) -> date:
    """Monday of the ISO week containing ``value``."""
    return value - timedelta(days=value.weekday())


def semester_of(value: date) -> tuple[int, str]:
    """Spring runs January-July, fall runs August-December."""
    return value.year, ("fall" if value.month >= 8 else "spring")


def days_until(target: datetime, now: datetime) -> int:
    return math.ceil((target - now).total_seconds() / 86400)
