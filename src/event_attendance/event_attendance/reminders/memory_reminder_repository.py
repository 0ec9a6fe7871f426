from __future__ import annotations

import threading
from dataclasses import replace
from typing import Iterable, Sequence

from .model import ScheduledReminder
from .repository import ReminderRepository


class InMemoryReminderRepository(ReminderRepository):
    def __init__(self):
        self._lock = threading.Lock()
        self._items: dict[str, ScheduledReminder] = {}

    def list_all(self) -> Sequence[ScheduledReminder]:
        with self._lock:
            items = list(self._items.values())
        items.sort(key=lambda r: r.fire_at)
        return items

    def list_for_record(self, record_id: str) -> Sequence[ScheduledReminder]:
        return [r for r in self.list_all() if r.record_id == record_id]

    def save_many(self, reminders: Sequence[ScheduledReminder]) -> None:
        with self._lock:
            for r in reminders:
                self._items[r.reminder_id] = r

    def mark_delivered(self, reminder_id: str) -> bool:
        with self._lock:
            current = self._items.get(reminder_id)
            if current is None:
                return False
            self._items[reminder_id] = replace(current, delivered=True)
            return True

    def delete_for_record(self, record_id: str) -> int:
        with self._lock:
            ids = [rid for rid, r in self._items.items() if r.record_id == record_id]
            for rid in ids:
                del self._items[rid]
            return len(ids)

    def delete_many(self, reminder_ids: Iterable[str]) -> int:
        removed = 0
        with self._lock:
            for rid in reminder_ids:
                if self._items.pop(rid, None) is not None:
                    removed += 1
        return removed
