from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import DegreeLevel


@dataclass(frozen=True)
class DegreeCredit:
    """Partial progress toward one requirement of a degree tier."""

    degree_level: DegreeLevel
    requirement_category: str
    requirement_description: str
    points_earned: int
    completion_percentage: int

    def to_dict(self) -> dict:
        return {
            "degree_level": self.degree_level.value,
            "requirement_category": self.requirement_category,
            "requirement_description": self.requirement_description,
            "points_earned": self.points_earned,
            "completion_percentage": self.completion_percentage,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DegreeCredit":
        return cls(
            degree_level=DegreeLevel(data["degree_level"]),
            requirement_category=str(data["requirement_category"]),
            requirement_description=str(data.get("requirement_description") or ""),
            points_earned=int(data["points_earned"]),
            completion_percentage=int(data["completion_percentage"]),
        )


@dataclass(frozen=True)
class BasePoints:
    """Unscaled award for one event type on both point scales."""

    points_a: int
    points_b: int

    @property
    def total(self) -> int:
        return self.points_a + self.points_b
