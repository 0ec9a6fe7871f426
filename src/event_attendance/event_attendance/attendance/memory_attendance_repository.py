from __future__ import annotations

import threading
from typing import Optional, Sequence

from ..core.exceptions import DuplicateCheckIn
from .model import AttendanceRecord, HistoryFilters
from .repository import AttendanceRepository


class InMemoryAttendanceRepository(AttendanceRepository):
    """Process-local store used by the ``memory`` backend and by tests."""

    def __init__(self):
        self._lock = threading.Lock()
        self._records: dict[str, AttendanceRecord] = {}

    def get_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._records.get(record_id)

    def get_open_for_user(self, user_id: str) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._find_open(user_id)

    def create_checkin(self, record: AttendanceRecord) -> None:
        with self._lock:
            if self._find_open(record.user_id) is not None:
                raise DuplicateCheckIn(f"User {record.user_id} already has an open check-in")
            self._records[record.record_id] = record

    def close_record(self, record: AttendanceRecord) -> bool:
        with self._lock:
            current = self._records.get(record.record_id)
            if current is None or not current.is_open:
                return False
            self._records[record.record_id] = record
            return True

    def list_history(self, user_id: str, filters: Optional[HistoryFilters] = None) -> Sequence[AttendanceRecord]:
        filters = filters or HistoryFilters()
        with self._lock:
            items = [r for r in self._records.values() if r.user_id == user_id and filters.matches(r)]
        items.sort(key=lambda r: r.checked_in_at, reverse=True)
        if filters.limit is not None:
            items = items[: filters.limit]
        return items

    def list_open(self) -> Sequence[AttendanceRecord]:
        with self._lock:
            items = [r for r in self._records.values() if r.is_open]
        items.sort(key=lambda r: r.event_end_at)
        return items

    def _find_open(self, user_id: str) -> Optional[AttendanceRecord]:
        for r in self._records.values():
            if r.user_id == user_id and r.is_open:
                return r
        return None
