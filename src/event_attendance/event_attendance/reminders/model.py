from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..common.validators import require_range
from ..core.constants import DEFAULT_REMINDER_INTERVALS
from ..core.enums import ReminderKind
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class ScheduledReminder:
    reminder_id: str
    record_id: str
    fire_at: datetime
    kind: ReminderKind
    offset_minutes: int
    timer_handle: Optional[str] = None
    delivered: bool = False

    def payload(self) -> "ReminderPayload":
        return ReminderPayload(reminder_id=self.reminder_id, record_id=self.record_id, kind=self.kind)

    def to_dict(self) -> dict:
        return {
            "reminder_id": self.reminder_id,
            "record_id": self.record_id,
            "fire_at": self.fire_at.isoformat(),
            "kind": self.kind.value,
            "offset_minutes": self.offset_minutes,
            "delivered": self.delivered,
        }


@dataclass(frozen=True)
class ReminderPayload:
    """What the dispatcher hands back when a timer fires."""

    reminder_id: str
    record_id: str
    kind: ReminderKind


@dataclass(frozen=True)
class Notification:
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ReminderConfig:
    enabled: bool = True
    reminder_intervals: tuple[int, ...] = DEFAULT_REMINDER_INTERVALS
    motivational_messages: bool = True
    deadline_alert: bool = True

    def __post_init__(self):
        for minutes in self.reminder_intervals:
            if not isinstance(minutes, int) or isinstance(minutes, bool):
                raise ValidationError(f"Reminder interval must be whole minutes: {minutes!r}")
            require_range(minutes, "reminder interval", 1, 24 * 60)

    @classmethod
    def from_settings(cls, settings) -> "ReminderConfig":
        raw = getattr(settings, "REMINDER_INTERVALS", DEFAULT_REMINDER_INTERVALS)
        if isinstance(raw, str):
            try:
                intervals = tuple(int(p) for p in raw.split(",") if p.strip())
            except ValueError:
                raise ValidationError(f"REMINDER_INTERVALS is not a list of minutes: {raw!r}") from None
        else:
            intervals = tuple(int(p) for p in raw)
        return cls(
            enabled=bool(getattr(settings, "REMINDERS_ENABLED", True)),
            reminder_intervals=intervals,
            motivational_messages=bool(getattr(settings, "REMINDER_MOTIVATION", True)),
            deadline_alert=bool(getattr(settings, "REMINDER_DEADLINE_ALERT", True)),
        )


@dataclass(frozen=True)
class ReminderStats:
    total_scheduled: int
    active_reminders: int
    expired_count: int
