from __future__ import annotations

from typing import Iterable, Protocol, Sequence

from .model import ScheduledReminder


class ReminderRepository(Protocol):
    """Durable source of truth for which reminders are outstanding."""

    def list_all(self) -> Sequence[ScheduledReminder]:
        raise NotImplementedError

    def list_for_record(self, record_id: str) -> Sequence[ScheduledReminder]:
        raise NotImplementedError

    def save_many(self, reminders: Sequence[ScheduledReminder]) -> None:
        """Insert or replace reminders by id."""

        raise NotImplementedError

    def mark_delivered(self, reminder_id: str) -> bool:
        raise NotImplementedError

    def delete_for_record(self, record_id: str) -> int:
        raise NotImplementedError

    def delete_many(self, reminder_ids: Iterable[str]) -> int:
        raise NotImplementedError
