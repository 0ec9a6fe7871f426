from __future__ import annotations

from decimal import Decimal

from ...points.model import BasePoints
from .base import AwardDecision, AwardStrategy


class MissedCheckoutStrategy(AwardStrategy):
    """A session nobody closed earns nothing."""

    def decide_award(self, *, base: BasePoints, duration_minutes: int) -> AwardDecision:
        return AwardDecision(points_a=0, points_b=0, multiplier=Decimal(0), note="missed checkout")
