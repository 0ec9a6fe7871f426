from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import EventType


@dataclass(frozen=True)
class EventMetadata:
    """Calendar entry as supplied by the event catalog."""

    event_id: str
    title: str
    event_type: EventType
    start_at: datetime
    end_at: datetime
    location: Optional[str] = None
    description: Optional[str] = None
    verification_code: Optional[str] = None
