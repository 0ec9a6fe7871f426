from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class AttendanceStreak:
    current_streak: int = 0
    longest_streak: int = 0
    total_events_attended: int = 0
    this_month_count: int = 0
    this_semester_count: int = 0
    this_year_count: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
