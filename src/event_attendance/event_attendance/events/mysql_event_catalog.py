from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import EventType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .catalog import EventCatalog
from .model import EventMetadata

_COLUMNS = "event_id, title, event_type, start_at, end_at, location, description, verification_code"


def _row_to_event(r: dict) -> EventMetadata:
    return EventMetadata(
        event_id=str(r["event_id"]),
        title=r["title"],
        event_type=EventType(r["event_type"]),
        start_at=r["start_at"],
        end_at=r["end_at"],
        location=r.get("location"),
        description=r.get("description"),
        verification_code=r.get("verification_code"),
    )


class MySQLEventCatalog(EventCatalog):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_event(self, event_id: str) -> Optional[EventMetadata]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events WHERE event_id=%s", (event_id,))
            r = fetchone(cur)
            return _row_to_event(r) if r else None

    def list_upcoming(self, *, start: datetime, end: datetime) -> Sequence[EventMetadata]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM events
                WHERE start_at >= %s AND start_at < %s
                ORDER BY start_at ASC
                """,
                (start, end),
            )
            return [_row_to_event(r) for r in fetchall(cur)]
