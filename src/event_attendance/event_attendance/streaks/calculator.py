from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import now_local, semester_of, week_start
from ..core.enums import AttendanceStatus
from .model import AttendanceStreak

_WEEK = timedelta(days=7)


class StreakCalculator:
    """Streak and period counts over a member's verified attendance.

    A streak is a run of consecutive ISO weeks (Monday start) that each hold
    at least one VERIFIED record. The current streak walks back from the most
    recent attended week and stops at the first gap.
    """

    def calculate(self, records: Iterable[AttendanceRecord], *, now: Optional[datetime] = None) -> AttendanceStreak:
        now = now or now_local()
        today = now.date()
        days = [r.checked_in_at.date() for r in records if r.status == AttendanceStatus.VERIFIED]
        if not days:
            return AttendanceStreak()

        weeks = sorted({week_start(d) for d in days})
        return AttendanceStreak(
            current_streak=self._current_run(weeks),
            longest_streak=self._longest_run(weeks),
            total_events_attended=len(days),
            this_month_count=sum(1 for d in days if (d.year, d.month) == (today.year, today.month)),
            this_semester_count=sum(1 for d in days if semester_of(d) == semester_of(today)),
            this_year_count=sum(1 for d in days if d.year == today.year),
        )

    @staticmethod
    def _current_run(weeks: list[date]) -> int:
        run = 1
        for newer, older in zip(reversed(weeks), reversed(weeks[:-1])):
            if newer - older != _WEEK:
                break
            run += 1
        return run

    @staticmethod
    def _longest_run(weeks: list[date]) -> int:
        longest = run = 1
        for older, newer in zip(weeks, weeks[1:]):
            run = run + 1 if newer - older == _WEEK else 1
            longest = max(longest, run)
        return longest
