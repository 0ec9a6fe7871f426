from __future__ import annotations

from ...common.numbers import round_half_up
from ...core.constants import FULL_ATTENDANCE_MULTIPLIER
from ...points.model import BasePoints
from .base import AwardDecision, AwardStrategy


class FullAttendanceStrategy(AwardStrategy):
    """Long sessions earn the full-attendance multiplier on both scales."""

    def __init__(self, multiplier=FULL_ATTENDANCE_MULTIPLIER):
        self._multiplier = multiplier

    def decide_award(self, *, base: BasePoints, duration_minutes: int) -> AwardDecision:
        return AwardDecision(
            points_a=round_half_up(base.points_a * self._multiplier),
            points_b=round_half_up(base.points_b * self._multiplier),
            multiplier=self._multiplier,
            note="full attendance bonus",
        )
