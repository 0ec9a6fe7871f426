from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from itertools import groupby
from typing import Callable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.locks import RecordLocks
from ..common.telemetry import NullTelemetry, Telemetry, track_safely
from ..core.constants import DEADLINE_ALERT_OFFSET_MINUTES, MOTIVATION_OFFSET_MINUTES
from ..core.enums import ReminderKind
from ..core.exceptions import DomainError, SchedulingFailure
from .dispatcher import ReminderDispatcher
from .messages import build_notification, immediate_checkout_notification
from .model import ReminderConfig, ReminderPayload, ReminderStats, ScheduledReminder
from .notifier import LoggingNotifier, Notifier
from .repository import ReminderRepository

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """Plans, persists and delivers checkout reminders for open attendance records.

    The reminder store is the source of truth. Dispatcher timers are best
    effort and are re-armed from the store by ``start()`` after a restart.
    Every timer comes back through ``on_fire``, which re-checks the record
    before anything is sent.
    """

    def __init__(
        self,
        reminders: ReminderRepository,
        attendance: AttendanceRepository,
        dispatcher: ReminderDispatcher,
        *,
        notifier: Optional[Notifier] = None,
        config: Optional[ReminderConfig] = None,
        locks: Optional[RecordLocks] = None,
        telemetry: Optional[Telemetry] = None,
        clock: Callable[[], datetime] = now_local,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ):
        self._reminders = reminders
        self._attendance = attendance
        self._dispatcher = dispatcher
        self._notifier = notifier or LoggingNotifier()
        self._config = config or ReminderConfig()
        self._locks = locks or RecordLocks()
        self._telemetry = telemetry or NullTelemetry()
        self._clock = clock
        self._new_id = id_factory

    @property
    def config(self) -> ReminderConfig:
        return self._config

    @property
    def locks(self) -> RecordLocks:
        return self._locks

    def update_config(self, config: ReminderConfig) -> None:
        """Applies to reminders scheduled from now on."""
        self._config = config
        logger.info("Reminder config updated: %s", config)

    # ---- lifecycle ----

    def start(self, *, now: Optional[datetime] = None) -> int:
        """Bind the dispatcher and restore timers for reminders still pending.

        Returns the number of re-armed reminders.
        """
        now = now or self._clock()
        self._dispatcher.bind(self.on_fire)

        pruned = self.prune_expired(now)
        orphaned = 0
        rearmed = 0

        stored = sorted(self._reminders.list_all(), key=lambda r: r.record_id)
        for record_id, group in groupby(stored, key=lambda r: r.record_id):
            group = list(group)
            with self._locks.hold(record_id):
                record = self._attendance.get_by_id(record_id)
                if record is None or not record.is_open:
                    orphaned += self._reminders.delete_many(r.reminder_id for r in group)
                    continue

                pending = [r for r in group if not r.delivered]
                restored = [replace(r, timer_handle=self._arm(r)) for r in pending]
                if restored:
                    self._reminders.save_many(restored)
                rearmed += len(restored)

        logger.info(
            "Reminder scheduler started: %d re-armed, %d expired pruned, %d orphaned removed",
            rearmed,
            pruned,
            orphaned,
        )
        return rearmed

    def shutdown(self) -> None:
        """Stop in-process timers. Stored reminders stay for the next start()."""
        self._dispatcher.shutdown()
        logger.info("Reminder scheduler stopped")

    # ---- scheduling ----

    def schedule(
        self,
        record: AttendanceRecord,
        config: Optional[ReminderConfig] = None,
        *,
        now: Optional[datetime] = None,
    ) -> list[ScheduledReminder]:
        cfg = config or self._config
        now = now or self._clock()

        with self._locks.hold(record.record_id):
            try:
                self._cancel_locked(record.record_id)
                current = self._attendance.get_by_id(record.record_id)
            except DomainError as exc:
                raise SchedulingFailure(f"Could not clear reminders for record {record.record_id}") from exc

            if not cfg.enabled or current is None or not current.is_open:
                return []
            record = current

            planned = [
                ScheduledReminder(
                    reminder_id=self._new_id(),
                    record_id=record.record_id,
                    fire_at=fire_at,
                    kind=kind,
                    offset_minutes=offset,
                )
                for fire_at, kind, offset in self._plan(record, cfg)
                if fire_at > now
            ]
            skipped = self._plan_size(cfg) - len(planned)
            if skipped:
                logger.debug("Skipped %d past-due reminders for record %s", skipped, record.record_id)
            if not planned:
                return []

            armed = [replace(r, timer_handle=self._arm(r)) for r in planned]
            try:
                self._reminders.save_many(armed)
            except Exception as exc:
                for reminder in armed:
                    self._disarm(reminder)
                raise SchedulingFailure(f"Could not persist reminders for record {record.record_id}") from exc

        logger.info("Scheduled %d reminders for record %s", len(armed), record.record_id)
        track_safely(self._telemetry, "reminders_scheduled", record_id=record.record_id, count=len(armed))
        return armed

    def cancel(self, record_id: str) -> int:
        """Remove every reminder of a record. Safe to call repeatedly."""
        with self._locks.hold(record_id):
            try:
                removed = self._cancel_locked(record_id)
            except DomainError as exc:
                raise SchedulingFailure(f"Could not cancel reminders for record {record_id}") from exc
        if removed:
            logger.info("Cancelled %d reminders for record %s", removed, record_id)
        return removed

    def prune_expired(self, now: Optional[datetime] = None) -> int:
        now = now or self._clock()
        expired = [r for r in self._reminders.list_all() if r.fire_at <= now]
        if not expired:
            return 0
        for reminder in expired:
            self._disarm(reminder)
        removed = self._reminders.delete_many(r.reminder_id for r in expired)
        logger.info("Pruned %d expired reminders", removed)
        return removed

    # ---- delivery ----

    def on_fire(self, payload: ReminderPayload) -> bool:
        """Deliver a fired reminder if its record is still open.

        Returns True when a notification was sent.
        """
        with self._locks.hold(payload.record_id):
            stored = {r.reminder_id: r for r in self._reminders.list_for_record(payload.record_id)}
            reminder = stored.get(payload.reminder_id)
            if reminder is None or reminder.delivered:
                logger.debug("Ignoring fired reminder %s: no longer pending", payload.reminder_id)
                return False

            record = self._attendance.get_by_id(payload.record_id)
            if record is None or not record.is_open:
                self._cancel_locked(payload.record_id)
                logger.info("Dropped stale reminders for closed record %s", payload.record_id)
                return False

            notification = build_notification(record, reminder)
            try:
                self._notifier.send(notification)
            except Exception:
                logger.warning("Notifier failed for reminder %s", reminder.reminder_id, exc_info=True)
                track_safely(self._telemetry, "reminder_delivery_failed", reminder_id=reminder.reminder_id)
                return False

            self._reminders.mark_delivered(reminder.reminder_id)

        track_safely(
            self._telemetry,
            "reminder_delivered",
            record_id=payload.record_id,
            kind=payload.kind.value,
        )
        return True

    def send_immediate(self, record: AttendanceRecord) -> bool:
        """Push a one-off "ready to check out?" notification."""
        if not record.is_open:
            return False
        try:
            self._notifier.send(immediate_checkout_notification(record))
        except Exception:
            logger.warning("Immediate reminder failed for record %s", record.record_id, exc_info=True)
            return False
        track_safely(self._telemetry, "immediate_reminder_sent", record_id=record.record_id)
        return True

    # ---- queries ----

    def active_reminders(
        self, record_id: Optional[str] = None, *, now: Optional[datetime] = None
    ) -> list[ScheduledReminder]:
        now = now or self._clock()
        source = self._reminders.list_for_record(record_id) if record_id else self._reminders.list_all()
        return sorted((r for r in source if not r.delivered and r.fire_at > now), key=lambda r: r.fire_at)

    def stats(self, *, now: Optional[datetime] = None) -> ReminderStats:
        now = now or self._clock()
        stored = list(self._reminders.list_all())
        return ReminderStats(
            total_scheduled=len(stored),
            active_reminders=sum(1 for r in stored if not r.delivered and r.fire_at > now),
            expired_count=sum(1 for r in stored if r.fire_at <= now),
        )

    # ---- internals ----

    @staticmethod
    def _plan(record: AttendanceRecord, cfg: ReminderConfig) -> list[tuple[datetime, ReminderKind, int]]:
        end = record.event_end_at
        plan = [
            (end - timedelta(minutes=minutes), ReminderKind.CHECKOUT_REMINDER, minutes)
            for minutes in cfg.reminder_intervals
        ]
        if cfg.motivational_messages:
            plan.append(
                (end - timedelta(minutes=MOTIVATION_OFFSET_MINUTES), ReminderKind.MOTIVATION, MOTIVATION_OFFSET_MINUTES)
            )
        if cfg.deadline_alert:
            plan.append(
                (
                    end + timedelta(minutes=DEADLINE_ALERT_OFFSET_MINUTES),
                    ReminderKind.DEADLINE_ALERT,
                    -DEADLINE_ALERT_OFFSET_MINUTES,
                )
            )
        return plan

    @staticmethod
    def _plan_size(cfg: ReminderConfig) -> int:
        return len(cfg.reminder_intervals) + int(cfg.motivational_messages) + int(cfg.deadline_alert)

    def _cancel_locked(self, record_id: str) -> int:
        existing = self._reminders.list_for_record(record_id)
        if not existing:
            return 0
        removed = self._reminders.delete_for_record(record_id)
        for reminder in existing:
            self._disarm(reminder)
        return removed

    def _arm(self, reminder: ScheduledReminder) -> Optional[str]:
        try:
            return self._dispatcher.register_timer(reminder.fire_at, reminder.payload())
        except Exception:
            logger.warning(
                "Dispatcher could not arm reminder %s for record %s",
                reminder.reminder_id,
                reminder.record_id,
                exc_info=True,
            )
            track_safely(
                self._telemetry,
                "reminder_arm_failed",
                reminder_id=reminder.reminder_id,
                record_id=reminder.record_id,
            )
            return None

    def _disarm(self, reminder: ScheduledReminder) -> None:
        if reminder.timer_handle is None:
            return
        try:
            self._dispatcher.cancel_timer(reminder.timer_handle)
        except Exception:
            logger.warning("Dispatcher could not cancel timer %s", reminder.timer_handle, exc_info=True)
