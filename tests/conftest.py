from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.event_attendance.event_attendance.attendance.memory_attendance_repository import InMemoryAttendanceRepository
from src.event_attendance.event_attendance.attendance.service import AttendanceTracker
from src.event_attendance.event_attendance.core.enums import EventType
from src.event_attendance.event_attendance.core.exceptions import PersistenceFailure
from src.event_attendance.event_attendance.events.catalog import InMemoryEventCatalog
from src.event_attendance.event_attendance.events.model import EventMetadata
from src.event_attendance.event_attendance.reminders.memory_reminder_repository import InMemoryReminderRepository
from src.event_attendance.event_attendance.reminders.service import ReminderScheduler

# Tuesday morning
FIXED_NOW = datetime(2026, 3, 10, 10, 0, 0)


class RecordingDispatcher:
    """Collects timers instead of running them; tests fire them by hand."""

    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.handler = None
        self.armed: dict[str, tuple] = {}
        self.cancelled: list[str] = []
        self.stopped = False
        self._seq = 0

    def bind(self, handler) -> None:
        self.handler = handler

    def register_timer(self, fire_at, payload) -> str:
        if self.fail:
            raise RuntimeError("timer service unavailable")
        self._seq += 1
        handle = f"timer-{self._seq}"
        self.armed[handle] = (fire_at, payload)
        return handle

    def cancel_timer(self, handle: str) -> None:
        self.cancelled.append(handle)
        self.armed.pop(handle, None)

    def shutdown(self) -> None:
        self.stopped = True
        self.armed.clear()

    def fire(self, handle: str):
        _, payload = self.armed.pop(handle)
        return self.handler(payload)


class MutableClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now += timedelta(**delta)


class RecordingNotifier:
    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send(self, notification) -> None:
        if self.fail:
            raise RuntimeError("push gateway down")
        self.sent.append(notification)


class RecordingTelemetry:
    def __init__(self):
        self.events: list[tuple[str, dict]] = []

    def track(self, event_name, properties=None) -> None:
        self.events.append((event_name, dict(properties or {})))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


class UnavailableReminderRepository(InMemoryReminderRepository):
    def save_many(self, reminders) -> None:
        raise PersistenceFailure("reminder table unavailable")


def make_event(event_id: str, event_type: EventType, start: datetime, minutes: int, **kwargs) -> EventMetadata:
    return EventMetadata(
        event_id=event_id,
        title=kwargs.pop("title", event_id.replace("-", " ").title()),
        event_type=event_type,
        start_at=start,
        end_at=start + timedelta(minutes=minutes),
        **kwargs,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def catalog(fixed_now) -> InMemoryEventCatalog:
    return InMemoryEventCatalog(
        [
            make_event("service-day", EventType.COMMUNITY_SERVICE, fixed_now, 120, title="Food Bank Harvest Drive"),
            make_event("chapter-meeting", EventType.FFA_MEETING, fixed_now, 90, verification_code="BARN42"),
            make_event("guest-talk", EventType.GUEST_SPEAKER, fixed_now, 60),
            make_event("county-show", EventType.LIVESTOCK_SHOW, fixed_now + timedelta(days=4), 480),
            make_event("spring-expo", EventType.AGRICULTURE_EXPO, fixed_now + timedelta(days=45), 240),
        ]
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendanceRepository:
    return InMemoryAttendanceRepository()


@pytest.fixture
def reminder_repo() -> InMemoryReminderRepository:
    return InMemoryReminderRepository()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def telemetry() -> RecordingTelemetry:
    return RecordingTelemetry()


@pytest.fixture
def scheduler(reminder_repo, attendance_repo, dispatcher, notifier, telemetry, fixed_now) -> ReminderScheduler:
    svc = ReminderScheduler(
        reminder_repo,
        attendance_repo,
        dispatcher,
        notifier=notifier,
        telemetry=telemetry,
        clock=lambda: fixed_now,
    )
    dispatcher.bind(svc.on_fire)
    return svc


@pytest.fixture
def tracker(attendance_repo, catalog, scheduler, telemetry, fixed_now) -> AttendanceTracker:
    return AttendanceTracker(attendance_repo, catalog, scheduler, telemetry=telemetry, clock=lambda: fixed_now)
