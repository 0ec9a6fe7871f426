from __future__ import annotations

from typing import Iterable, Sequence

from ..core.enums import ReminderKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import ScheduledReminder
from .repository import ReminderRepository

_COLUMNS = "reminder_id, record_id, fire_at, kind, offset_minutes, timer_handle, delivered"


def row_to_reminder(r: dict) -> ScheduledReminder:
    return ScheduledReminder(
        reminder_id=str(r["reminder_id"]),
        record_id=str(r["record_id"]),
        fire_at=r["fire_at"],
        kind=ReminderKind(r["kind"]),
        offset_minutes=int(r["offset_minutes"]),
        timer_handle=r.get("timer_handle"),
        delivered=bool(r.get("delivered")),
    )


class MySQLReminderRepository(ReminderRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[ScheduledReminder]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM scheduled_reminders ORDER BY fire_at ASC")
            return [row_to_reminder(r) for r in fetchall(cur)]

    def list_for_record(self, record_id: str) -> Sequence[ScheduledReminder]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM scheduled_reminders WHERE record_id=%s ORDER BY fire_at ASC",
                (record_id,),
            )
            return [row_to_reminder(r) for r in fetchall(cur)]

    def save_many(self, reminders: Sequence[ScheduledReminder]) -> None:
        if not reminders:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO scheduled_reminders(reminder_id, record_id, fire_at, kind, offset_minutes, timer_handle, delivered)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    fire_at=VALUES(fire_at), kind=VALUES(kind), offset_minutes=VALUES(offset_minutes),
                    timer_handle=VALUES(timer_handle), delivered=VALUES(delivered)
                """,
                [
                    (r.reminder_id, r.record_id, r.fire_at, r.kind.value, r.offset_minutes, r.timer_handle, int(r.delivered))
                    for r in reminders
                ],
            )

    def mark_delivered(self, reminder_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE scheduled_reminders SET delivered=1 WHERE reminder_id=%s", (reminder_id,))
            return cur.rowcount > 0

    def delete_for_record(self, record_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM scheduled_reminders WHERE record_id=%s", (record_id,))
            return int(cur.rowcount)

    def delete_many(self, reminder_ids: Iterable[str]) -> int:
        ids = list(reminder_ids)
        if not ids:
            return 0
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM scheduled_reminders WHERE reminder_id IN ({placeholders})", tuple(ids))
            return int(cur.rowcount)
