from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import FULL_ATTENDANCE_MINUTES
from .strategies.base import AwardStrategy
from .strategies.full_attendance_strategy import FullAttendanceStrategy
from .strategies.missed_checkout_strategy import MissedCheckoutStrategy
from .strategies.standard_strategy import StandardStrategy


@dataclass
class AwardStrategyFactory:
    """Factory Pattern: choose the award strategy for a closed session."""

    full_attendance_minutes: int = FULL_ATTENDANCE_MINUTES

    def for_checkout(self, *, duration_minutes: int) -> AwardStrategy:
        if duration_minutes >= self.full_attendance_minutes:
            return FullAttendanceStrategy()
        return StandardStrategy()

    def for_missed_checkout(self) -> AwardStrategy:
        return MissedCheckoutStrategy()
