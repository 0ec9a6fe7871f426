from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ...points.model import BasePoints


@dataclass(frozen=True)
class AwardDecision:
    points_a: int
    points_b: int
    multiplier: Decimal
    note: Optional[str] = None


class AwardStrategy(ABC):
    """Strategy Pattern: encapsulate how a session's points are awarded."""

    @abstractmethod
    def decide_award(self, *, base: BasePoints, duration_minutes: int) -> AwardDecision:
        raise NotImplementedError
