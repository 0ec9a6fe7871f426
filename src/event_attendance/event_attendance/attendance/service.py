from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Optional, Union

from ..common.datetime_utils import days_until, elapsed_minutes, now_local
from ..common.locks import RecordLocks
from ..common.telemetry import NullTelemetry, Telemetry, track_safely
from ..common.validators import optional_enum, optional_text, require_non_empty, require_range
from ..core.constants import DEFAULT_UPCOMING_DAYS, RECENTLY_ENDED_WINDOW_MINUTES
from ..core.enums import AttendanceStatus, EventType, VerificationMethod
from ..core.exceptions import (
    AlreadyCheckedOut,
    DuplicateCheckIn,
    NotOwner,
    RecordNotFound,
    SchedulingFailure,
    ValidationError,
)
from ..events.catalog import EventCatalog
from ..events.model import EventMetadata
from ..points.table import PointsTable
from ..reminders.model import ReminderConfig, ScheduledReminder
from ..reminders.service import ReminderScheduler
from ..streaks.calculator import StreakCalculator
from ..streaks.model import AttendanceStreak
from .collaborators import DegreeProgressUpdater, NoOpDegreeProgressUpdater, NoOpPointsLedger, PointsLedger
from .encouragement import encouragement_for
from .factory import AwardStrategyFactory
from .model import AttendanceRecord, CheckOutDetails, GeoPoint, HistoryFilters, UpcomingEventAlert
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_CODE_METHODS = (VerificationMethod.QR_CODE, VerificationMethod.INSTRUCTOR_CODE)


class AttendanceTracker:
    """Check-in/check-out state machine for event attendance.

    CHECKED_IN -> VERIFIED on check_out, CHECKED_IN -> MISSED_CHECKOUT on the
    sweep. Points and degree credits are fixed at the moment a record closes.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        catalog: EventCatalog,
        scheduler: ReminderScheduler,
        *,
        points_table: Optional[PointsTable] = None,
        strategy_factory: Optional[AwardStrategyFactory] = None,
        streaks: Optional[StreakCalculator] = None,
        locks: Optional[RecordLocks] = None,
        telemetry: Optional[Telemetry] = None,
        degree_progress: Optional[DegreeProgressUpdater] = None,
        points_ledger: Optional[PointsLedger] = None,
        clock: Callable[[], datetime] = now_local,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ):
        self._attendance = attendance
        self._catalog = catalog
        self._scheduler = scheduler
        self._points = points_table or PointsTable()
        self._factory = strategy_factory or AwardStrategyFactory()
        self._streaks = streaks or StreakCalculator()
        self._locks = locks or scheduler.locks
        self._telemetry = telemetry or NullTelemetry()
        self._degree_progress = degree_progress or NoOpDegreeProgressUpdater()
        self._points_ledger = points_ledger or NoOpPointsLedger()
        self._clock = clock
        self._new_id = id_factory

    # ---- lifecycle ----

    def check_in(
        self,
        user_id: str,
        event_id: str,
        event_type: Union[EventType, str, None] = None,
        verification_method: Union[VerificationMethod, str, None] = None,
        location: Optional[GeoPoint] = None,
        *,
        verification_code: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or self._clock()
        user_id = require_non_empty(user_id, "user_id")
        event_id = require_non_empty(event_id, "event_id")
        verification_code = optional_text(verification_code, "verification_code")
        notes = optional_text(notes, "notes")

        event = self._catalog.get_event(event_id)
        if event is None:
            raise ValidationError(f"Event {event_id} does not exist")

        resolved_type = self._points.resolve(event_type if event_type is not None else event.event_type)
        method = self._verification_method(event, verification_method, verification_code, location)
        if location is not None:
            require_range(location.latitude, "latitude", -90, 90)
            require_range(location.longitude, "longitude", -180, 180)

        if self._attendance.get_open_for_user(user_id) is not None:
            raise DuplicateCheckIn(f"User {user_id} is already checked in to an event")

        record = AttendanceRecord(
            record_id=self._new_id(),
            user_id=user_id,
            event_id=event.event_id,
            event_type=resolved_type,
            event_title=event.title,
            event_end_at=event.end_at,
            checked_in_at=now,
            status=AttendanceStatus.CHECKED_IN,
            verification_method=method,
            location=location,
            verification_code=verification_code,
            check_in_notes=notes,
        )
        self._attendance.create_checkin(record)
        logger.info("User %s checked in to %s (record %s)", user_id, event.event_id, record.record_id)
        track_safely(
            self._telemetry,
            "attendance_check_in",
            user_id=user_id,
            event_id=event.event_id,
            event_type=resolved_type.value,
            verification_method=method.value,
        )

        try:
            self._scheduler.schedule(record, now=now)
        except SchedulingFailure as exc:
            self._report_scheduling_failure(record.record_id, exc)
        return record

    def check_out(
        self,
        user_id: str,
        record_id: str,
        reflection: Optional[CheckOutDetails] = None,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or self._clock()
        if reflection is not None:
            self._validate_reflection(reflection)

        with self._locks.hold(record_id):
            record = self._load_owned(user_id, record_id)
            if not record.is_open:
                raise AlreadyCheckedOut(f"Record {record_id} is {record.status.value}")

            duration = elapsed_minutes(record.checked_in_at, now)
            base = self._points.lookup(record.event_type)
            strategy = self._factory.for_checkout(duration_minutes=duration)
            decision = strategy.decide_award(base=base, duration_minutes=duration)

            closed = replace(
                record,
                status=AttendanceStatus.VERIFIED,
                checked_out_at=now,
                duration_minutes=duration,
                points_a=decision.points_a,
                points_b=decision.points_b,
                degree_credits=tuple(self._points.credits_for(record.event_type)),
                reflection=reflection,
            )
            if not self._attendance.close_record(closed):
                raise AlreadyCheckedOut(f"Record {record_id} was closed concurrently")
            self._cancel_quietly(record_id)

        logger.info(
            "User %s checked out of record %s: %d min, A=%d B=%d (%s)",
            user_id,
            record_id,
            duration,
            closed.points_a,
            closed.points_b,
            decision.note or "standard",
        )
        track_safely(
            self._telemetry,
            "attendance_check_out",
            user_id=user_id,
            record_id=record_id,
            duration_minutes=duration,
            points_a=closed.points_a,
            points_b=closed.points_b,
        )
        self._notify_collaborators(closed)
        return closed

    def sweep_missed_checkouts(self, cutoff: Union[timedelta, int], *, now: Optional[datetime] = None) -> int:
        """Close open records whose event ended more than ``cutoff`` ago.

        ``cutoff`` is a timedelta or whole minutes. Returns the number of
        records moved to MISSED_CHECKOUT.
        """
        window = cutoff if isinstance(cutoff, timedelta) else timedelta(minutes=cutoff)
        if window < timedelta(0):
            raise ValidationError("cutoff must not be negative")
        now = now or self._clock()
        threshold = now - window
        strategy = self._factory.for_missed_checkout()

        swept = 0
        for candidate in self._attendance.list_open():
            if candidate.event_end_at >= threshold:
                continue
            with self._locks.hold(candidate.record_id):
                record = self._attendance.get_by_id(candidate.record_id)
                if record is None or not record.is_open:
                    continue
                decision = strategy.decide_award(base=self._points.lookup(record.event_type), duration_minutes=0)
                missed = replace(
                    record,
                    status=AttendanceStatus.MISSED_CHECKOUT,
                    points_a=decision.points_a,
                    points_b=decision.points_b,
                    degree_credits=(),
                )
                if not self._attendance.close_record(missed):
                    continue
                self._cancel_quietly(record.record_id)
            swept += 1
            logger.info("Record %s marked MISSED_CHECKOUT", candidate.record_id)

        if swept:
            track_safely(self._telemetry, "missed_checkouts_swept", count=swept)
        return swept

    # ---- queries ----

    def get_history(self, user_id: str, filters: Optional[HistoryFilters] = None) -> list[AttendanceRecord]:
        user_id = require_non_empty(user_id, "user_id")
        return list(self._attendance.list_history(user_id, filters))

    def get_streak(self, user_id: str, *, now: Optional[datetime] = None) -> AttendanceStreak:
        user_id = require_non_empty(user_id, "user_id")
        return self._streaks.calculate(self._attendance.list_history(user_id), now=now or self._clock())

    def get_upcoming_with_potential_points(
        self,
        user_id: str,
        *,
        now: Optional[datetime] = None,
        days: int = DEFAULT_UPCOMING_DAYS,
    ) -> list[UpcomingEventAlert]:
        now = now or self._clock()
        if days < 0:
            raise ValidationError("days must not be negative")
        streak = self.get_streak(user_id, now=now)

        events = self._catalog.list_upcoming(start=now, end=now + timedelta(days=days))
        alerts = [
            UpcomingEventAlert(
                event_id=e.event_id,
                event_title=e.title,
                event_type=e.event_type,
                starts_at=e.start_at,
                potential_points=self._points.potential_points(e.event_type),
                degree_progress_impact=self._points.degree_impact(e.event_type),
                attendance_encouragement=encouragement_for(e.event_id, streak),
                days_until_event=days_until(e.start_at, now),
            )
            for e in events
        ]
        alerts.sort(key=lambda a: a.starts_at)
        return alerts

    def get_active_attendances_needing_reminder(
        self, user_id: str, *, now: Optional[datetime] = None
    ) -> list[AttendanceRecord]:
        """Open records whose event ended within the last half hour."""
        user_id = require_non_empty(user_id, "user_id")
        now = now or self._clock()
        window_start = now - timedelta(minutes=RECENTLY_ENDED_WINDOW_MINUTES)
        record = self._attendance.get_open_for_user(user_id)
        if record is None or not (window_start <= record.event_end_at <= now):
            return []
        return [record]

    # ---- manual reminder actions ----

    def schedule_reminders(
        self, user_id: str, record_id: str, config: Optional[ReminderConfig] = None
    ) -> list[ScheduledReminder]:
        record = self._load_open(user_id, record_id)
        return self._scheduler.schedule(record, config)

    def cancel_reminders(self, user_id: str, record_id: str) -> int:
        self._load_open(user_id, record_id)
        return self._scheduler.cancel(record_id)

    def send_checkout_reminder(self, user_id: str, record_id: str) -> bool:
        record = self._load_open(user_id, record_id)
        return self._scheduler.send_immediate(record)

    # ---- internals ----

    def _load_owned(self, user_id: str, record_id: str) -> AttendanceRecord:
        user_id = require_non_empty(user_id, "user_id")
        record = self._attendance.get_by_id(record_id)
        if record is None:
            raise RecordNotFound(f"Attendance record {record_id} not found")
        if record.user_id != user_id:
            raise NotOwner(f"Attendance record {record_id} belongs to another user")
        return record

    def _load_open(self, user_id: str, record_id: str) -> AttendanceRecord:
        record = self._load_owned(user_id, record_id)
        if not record.is_open:
            raise AlreadyCheckedOut(f"Record {record_id} is {record.status.value}")
        return record

    @staticmethod
    def _verification_method(
        event: EventMetadata,
        requested: Union[VerificationMethod, str, None],
        code: Optional[str],
        location: Optional[GeoPoint],
    ) -> VerificationMethod:
        method = optional_enum(VerificationMethod, requested, "verification_method")
        if method is None:
            if code:
                method = VerificationMethod.INSTRUCTOR_CODE
            elif location is not None:
                method = VerificationMethod.LOCATION_BASED
            else:
                method = VerificationMethod.SELF_REPORTED

        if method in _CODE_METHODS and not code:
            raise ValidationError(f"{method.value} check-in requires a verification code")
        if code and event.verification_code and code != event.verification_code:
            raise ValidationError("Verification code does not match this event")
        return method

    @staticmethod
    def _validate_reflection(reflection: CheckOutDetails) -> None:
        if reflection.overall_rating is not None:
            require_range(reflection.overall_rating, "overall_rating", 1, 5)
        if reflection.networking_contacts is not None and reflection.networking_contacts < 0:
            raise ValidationError("networking_contacts must not be negative")

    def _cancel_quietly(self, record_id: str) -> None:
        try:
            self._scheduler.cancel(record_id)
        except SchedulingFailure as exc:
            self._report_scheduling_failure(record_id, exc)

    def _report_scheduling_failure(self, record_id: str, exc: SchedulingFailure) -> None:
        logger.warning("Reminder bookkeeping failed for record %s: %s", record_id, exc)
        track_safely(self._telemetry, "reminder_scheduling_failed", record_id=record_id, error=str(exc))

    def _notify_collaborators(self, record: AttendanceRecord) -> None:
        try:
            self._points_ledger.award_points(record.user_id, record)
        except Exception:
            logger.warning("Points ledger update failed for record %s", record.record_id, exc_info=True)
        try:
            self._degree_progress.update_degree_progress(record.user_id, record.degree_credits)
        except Exception:
            logger.warning("Degree progress update failed for record %s", record.record_id, exc_info=True)
