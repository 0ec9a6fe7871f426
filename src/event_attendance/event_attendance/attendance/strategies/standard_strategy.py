from __future__ import annotations

from decimal import Decimal

from ...points.model import BasePoints
from .base import AwardDecision, AwardStrategy


class StandardStrategy(AwardStrategy):
    """Base points, no duration bonus."""

    def decide_award(self, *, base: BasePoints, duration_minutes: int) -> AwardDecision:
        return AwardDecision(points_a=base.points_a, points_b=base.points_b, multiplier=Decimal(1))
