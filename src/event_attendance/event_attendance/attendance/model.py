from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, EventType, VerificationMethod
from ..core.exceptions import ValidationError
from ..points.model import DegreeCredit


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float
    address: Optional[str] = None

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude, "address": self.address}

    @classmethod
    def from_dict(cls, data: dict) -> "GeoPoint":
        return cls(latitude=float(data["latitude"]), longitude=float(data["longitude"]), address=data.get("address"))


@dataclass(frozen=True)
class CheckOutDetails:
    """Optional reflection captured at checkout. Never affects point math."""

    reflection_notes: Optional[str] = None
    skills_learned: tuple[str, ...] = ()
    networking_contacts: Optional[int] = None
    overall_rating: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "reflection_notes": self.reflection_notes,
            "skills_learned": list(self.skills_learned),
            "networking_contacts": self.networking_contacts,
            "overall_rating": self.overall_rating,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CheckOutDetails":
        return cls(
            reflection_notes=data.get("reflection_notes"),
            skills_learned=tuple(data.get("skills_learned") or ()),
            networking_contacts=data.get("networking_contacts"),
            overall_rating=data.get("overall_rating"),
        )


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one check-in attempt and, later, its outcome."""

    record_id: str
    user_id: str
    event_id: str
    event_type: EventType
    event_title: str
    event_end_at: datetime
    checked_in_at: datetime
    status: AttendanceStatus
    verification_method: VerificationMethod
    checked_out_at: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    points_a: int = 0
    points_b: int = 0
    degree_credits: tuple[DegreeCredit, ...] = ()
    location: Optional[GeoPoint] = None
    verification_code: Optional[str] = None
    check_in_notes: Optional[str] = None
    reflection: Optional[CheckOutDetails] = None

    @property
    def is_open(self) -> bool:
        return self.status == AttendanceStatus.CHECKED_IN

    @property
    def total_points(self) -> int:
        return self.points_a + self.points_b

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "user_id": self.user_id,
            "event_id": self.event_id,
            "event_type": self.event_type.value,
            "event_title": self.event_title,
            "event_end_at": self.event_end_at.isoformat(),
            "checked_in_at": self.checked_in_at.isoformat(),
            "checked_out_at": self.checked_out_at.isoformat() if self.checked_out_at else None,
            "status": self.status.value,
            "verification_method": self.verification_method.value,
            "duration_minutes": self.duration_minutes,
            "points_a": self.points_a,
            "points_b": self.points_b,
            "degree_credits": [c.to_dict() for c in self.degree_credits],
            "location": self.location.to_dict() if self.location else None,
            "check_in_notes": self.check_in_notes,
            "reflection": self.reflection.to_dict() if self.reflection else None,
        }


@dataclass(frozen=True)
class HistoryFilters:
    event_type: Optional[EventType] = None
    status: Optional[AttendanceStatus] = None
    start: Optional[date] = None
    end: Optional[date] = None
    limit: Optional[int] = None

    def __post_init__(self) -> None:
        if self.limit is None:
            return
        if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 0:
            raise ValidationError("limit must be a whole number of zero or more")

    def matches(self, record: AttendanceRecord) -> bool:
        day = record.checked_in_at.date()
        if self.event_type is not None and record.event_type != self.event_type:
            return False
        if self.status is not None and record.status != self.status:
            return False
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


@dataclass(frozen=True)
class UpcomingEventAlert:
    """Read-model for the "upcoming events worth attending" list."""

    event_id: str
    event_title: str
    event_type: EventType
    starts_at: datetime
    potential_points: int
    degree_progress_impact: str
    attendance_encouragement: str
    days_until_event: int

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "event_title": self.event_title,
            "event_type": self.event_type.value,
            "event_date": self.starts_at.date().isoformat(),
            "event_time": self.starts_at.strftime("%H:%M"),
            "potential_points": self.potential_points,
            "degree_progress_impact": self.degree_progress_impact,
            "attendance_encouragement": self.attendance_encouragement,
            "days_until_event": self.days_until_event,
        }
