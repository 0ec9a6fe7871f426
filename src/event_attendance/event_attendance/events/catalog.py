from __future__ import annotations

import json
import threading
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Protocol, Sequence, Union

from ..common.datetime_utils import parse_iso_datetime
from ..core.enums import EventType
from .model import EventMetadata


class EventCatalog(Protocol):
    def get_event(self, event_id: str) -> Optional[EventMetadata]:
        raise NotImplementedError

    def list_upcoming(self, *, start: datetime, end: datetime) -> Sequence[EventMetadata]:
        """Events starting in [start, end), ordered by start time."""

        raise NotImplementedError


class InMemoryEventCatalog(EventCatalog):
    def __init__(self, events: Iterable[EventMetadata] = ()):
        self._lock = threading.Lock()
        self._events: dict[str, EventMetadata] = {e.event_id: e for e in events}

    def add(self, event: EventMetadata) -> None:
        with self._lock:
            self._events[event.event_id] = event

    def get_event(self, event_id: str) -> Optional[EventMetadata]:
        with self._lock:
            return self._events.get(event_id)

    def list_upcoming(self, *, start: datetime, end: datetime) -> Sequence[EventMetadata]:
        with self._lock:
            items = [e for e in self._events.values() if start <= e.start_at < end]
        items.sort(key=lambda e: e.start_at)
        return items

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "InMemoryEventCatalog":
        """Load a JSON list of events (ISO datetimes for start_at/end_at)."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls(
            EventMetadata(
                event_id=str(item["event_id"]),
                title=str(item["title"]),
                event_type=EventType(item["event_type"]),
                start_at=parse_iso_datetime(item["start_at"]),
                end_at=parse_iso_datetime(item["end_at"]),
                location=item.get("location"),
                description=item.get("description"),
                verification_code=item.get("verification_code"),
            )
            for item in raw
        )
