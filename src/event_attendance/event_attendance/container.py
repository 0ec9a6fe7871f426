from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from .attendance.collaborators import DegreeProgressUpdater, PointsLedger
from .attendance.factory import AwardStrategyFactory
from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceTracker
from .common.datetime_utils import now_local
from .common.locks import RecordLocks
from .common.telemetry import NullTelemetry, Telemetry
from .core.constants import DEFAULT_MISSED_CHECKOUT_CUTOFF_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .events.catalog import EventCatalog, InMemoryEventCatalog
from .events.mysql_event_catalog import MySQLEventCatalog
from .points.table import PointsTable
from .reminders.dispatcher import ReminderDispatcher, ThreadingTimerDispatcher
from .reminders.memory_reminder_repository import InMemoryReminderRepository
from .reminders.model import ReminderConfig
from .reminders.mysql_reminder_repository import MySQLReminderRepository
from .reminders.notifier import LoggingNotifier, Notifier
from .reminders.repository import ReminderRepository
from .reminders.service import ReminderScheduler

STORE_BACKENDS = ("mysql", "memory")


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    attendance_repo: AttendanceRepository
    reminder_repo: ReminderRepository
    event_catalog: EventCatalog
    dispatcher: ReminderDispatcher

    reminder_scheduler: ReminderScheduler
    attendance_tracker: AttendanceTracker

    missed_checkout_cutoff_minutes: int = DEFAULT_MISSED_CHECKOUT_CUTOFF_MINUTES


def build_container(
    *,
    db_config: Optional[dict] = None,
    store_backend: str = "mysql",
    events_file: Union[str, Path, None] = None,
    reminder_config: Optional[ReminderConfig] = None,
    catalog: Optional[EventCatalog] = None,
    dispatcher: Optional[ReminderDispatcher] = None,
    notifier: Optional[Notifier] = None,
    telemetry: Optional[Telemetry] = None,
    degree_progress: Optional[DegreeProgressUpdater] = None,
    points_ledger: Optional[PointsLedger] = None,
    missed_checkout_cutoff_minutes: int = DEFAULT_MISSED_CHECKOUT_CUTOFF_MINUTES,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    backend = (store_backend or "mysql").lower()
    if backend not in STORE_BACKENDS:
        raise ValueError(f"STORE_BACKEND must be one of {STORE_BACKENDS}, got {store_backend!r}")

    conn: Optional[DatabaseConnection] = None
    if backend == "mysql":
        conn = DatabaseConnection(DBConfig.from_dict(db_config or {}))
        attendance_repo: AttendanceRepository = MySQLAttendanceRepository(conn)
        reminder_repo: ReminderRepository = MySQLReminderRepository(conn)
        event_catalog = catalog or MySQLEventCatalog(conn)
    else:
        attendance_repo = InMemoryAttendanceRepository()
        reminder_repo = InMemoryReminderRepository()
        if catalog is None:
            catalog = InMemoryEventCatalog.from_json_file(events_file) if events_file else InMemoryEventCatalog()
        event_catalog = catalog

    telemetry = telemetry or NullTelemetry()
    dispatcher = dispatcher or ThreadingTimerDispatcher(clock=clock)
    locks = RecordLocks()

    reminder_scheduler = ReminderScheduler(
        reminder_repo,
        attendance_repo,
        dispatcher,
        notifier=notifier or LoggingNotifier(),
        config=reminder_config or ReminderConfig(),
        locks=locks,
        telemetry=telemetry,
        clock=clock,
    )
    attendance_tracker = AttendanceTracker(
        attendance_repo,
        event_catalog,
        reminder_scheduler,
        points_table=PointsTable(),
        strategy_factory=AwardStrategyFactory(),
        locks=locks,
        telemetry=telemetry,
        degree_progress=degree_progress,
        points_ledger=points_ledger,
        clock=clock,
    )

    return Container(
        conn=conn,
        attendance_repo=attendance_repo,
        reminder_repo=reminder_repo,
        event_catalog=event_catalog,
        dispatcher=dispatcher,
        reminder_scheduler=reminder_scheduler,
        attendance_tracker=attendance_tracker,
        missed_checkout_cutoff_minutes=int(missed_checkout_cutoff_minutes),
    )
