"""Static point matrices and degree-credit fragments per event type.

Scale A is the AET point system, scale B the SAE point system.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence, Union

from ..core.enums import DegreeLevel, EventType
from ..core.exceptions import UnknownEventType
from .model import BasePoints, DegreeCredit

AET_POINTS: dict[EventType, int] = {
    EventType.FFA_MEETING: 5,
    EventType.FFA_COMPETITION: 15,
    EventType.FFA_CONFERENCE: 20,
    EventType.LIVESTOCK_SHOW: 25,
    EventType.COUNTY_FAIR: 20,
    EventType.STATE_FAIR: 30,
    EventType.CAREER_DEVELOPMENT_EVENT: 20,
    EventType.LEADERSHIP_TRAINING: 15,
    EventType.COMMUNITY_SERVICE: 10,
    EventType.INDUSTRY_TOUR: 12,
    EventType.GUEST_SPEAKER: 8,
    EventType.SKILLS_WORKSHOP: 15,
    EventType.AGRICULTURE_EXPO: 18,
    EventType.VOLUNTEER_ACTIVITY: 8,
    EventType.INTERNSHIP: 50,
    EventType.JOB_SHADOW: 25,
    EventType.COLLEGE_VISIT: 15,
    EventType.SCHOLARSHIP_EVENT: 10,
    EventType.AWARDS_BANQUET: 12,
    EventType.OTHER: 5,
}

SAE_POINTS: dict[EventType, int] = {
    EventType.FFA_MEETING: 3,
    EventType.FFA_COMPETITION: 10,
    EventType.FFA_CONFERENCE: 15,
    EventType.LIVESTOCK_SHOW: 30,
    EventType.COUNTY_FAIR: 25,
    EventType.STATE_FAIR: 40,
    EventType.CAREER_DEVELOPMENT_EVENT: 15,
    EventType.LEADERSHIP_TRAINING: 8,
    EventType.COMMUNITY_SERVICE: 5,
    EventType.INDUSTRY_TOUR: 20,
    EventType.GUEST_SPEAKER: 5,
    EventType.SKILLS_WORKSHOP: 12,
    EventType.AGRICULTURE_EXPO: 20,
    EventType.VOLUNTEER_ACTIVITY: 3,
    EventType.INTERNSHIP: 75,
    EventType.JOB_SHADOW: 35,
    EventType.COLLEGE_VISIT: 10,
    EventType.SCHOLARSHIP_EVENT: 5,
    EventType.AWARDS_BANQUET: 8,
    EventType.OTHER: 2,
}

# Event types missing here earn no degree credit.
DEGREE_CREDITS: dict[EventType, tuple[DegreeCredit, ...]] = {
    EventType.FFA_MEETING: (
        DegreeCredit(DegreeLevel.GREENHAND, "chapter_participation", "Attend chapter meetings", 1, 10),
        DegreeCredit(DegreeLevel.CHAPTER, "chapter_participation", "Active chapter member", 1, 5),
    ),
    EventType.FFA_COMPETITION: (
        DegreeCredit(DegreeLevel.CHAPTER, "leadership_development", "Participate in FFA activities", 3, 25),
        DegreeCredit(DegreeLevel.STATE, "competition_participation", "Compete in CDE/LDE events", 5, 50),
    ),
    EventType.COMMUNITY_SERVICE: (
        DegreeCredit(DegreeLevel.GREENHAND, "community_service", "Complete community service hours", 2, 20),
        DegreeCredit(DegreeLevel.CHAPTER, "community_service", "Leadership through service", 3, 15),
    ),
    EventType.LIVESTOCK_SHOW: (
        DegreeCredit(DegreeLevel.CHAPTER, "sae_advancement", "SAE project participation", 4, 40),
        DegreeCredit(DegreeLevel.STATE, "sae_excellence", "Advanced SAE demonstration", 6, 30),
    ),
    EventType.OTHER: (
        DegreeCredit(DegreeLevel.DISCOVERY, "exploration", "Agricultural exploration activities", 1, 5),
    ),
}


class PointsTable:
    def __init__(
        self,
        points_a: Optional[Mapping[EventType, int]] = None,
        points_b: Optional[Mapping[EventType, int]] = None,
        credits: Optional[Mapping[EventType, Sequence[DegreeCredit]]] = None,
    ):
        self._points_a = dict(points_a if points_a is not None else AET_POINTS)
        self._points_b = dict(points_b if points_b is not None else SAE_POINTS)
        self._credits = {k: tuple(v) for k, v in (credits if credits is not None else DEGREE_CREDITS).items()}

    def resolve(self, event_type: Union[EventType, str]) -> EventType:
        """Normalize a tag, raising UnknownEventType if either scale lacks it."""
        try:
            resolved = event_type if isinstance(event_type, EventType) else EventType(event_type)
        except ValueError:
            raise UnknownEventType(f"Unknown event type: {event_type!r}") from None

        if resolved not in self._points_a or resolved not in self._points_b:
            raise UnknownEventType(f"Unknown event type: {resolved.value!r}")
        return resolved

    def lookup(self, event_type: Union[EventType, str]) -> BasePoints:
        resolved = self.resolve(event_type)
        return BasePoints(points_a=self._points_a[resolved], points_b=self._points_b[resolved])

    def credits_for(self, event_type: Union[EventType, str]) -> list[DegreeCredit]:
        return list(self._credits.get(self.resolve(event_type), ()))

    def potential_points(self, event_type: Union[EventType, str]) -> int:
        return self.lookup(event_type).total

    def degree_impact(self, event_type: Union[EventType, str]) -> str:
        credits = self.credits_for(event_type)
        if not credits:
            return "Contributes to overall FFA experience"
        main = credits[0]
        return f"Advances {main.degree_level.value} degree by {main.completion_percentage}%"

    def event_types(self) -> list[EventType]:
        return [t for t in EventType if t in self._points_a and t in self._points_b]
