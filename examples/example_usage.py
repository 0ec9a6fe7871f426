"""Example: drive the tracker directly (no Flask).

Controllers are thin; the lifecycle lives in AttendanceTracker.
"""

from datetime import datetime, timedelta

from src.event_attendance.event_attendance.common.logging_utils import configure_logging
from src.event_attendance.event_attendance.container import build_container
from src.event_attendance.event_attendance.core.enums import EventType
from src.event_attendance.event_attendance.events.catalog import InMemoryEventCatalog
from src.event_attendance.event_attendance.events.model import EventMetadata


def main():
    configure_logging("INFO")
    start = datetime(2026, 11, 21, 10, 0)
    catalog = InMemoryEventCatalog(
        [
            EventMetadata(
                event_id="community-service-001",
                title="Food Bank Harvest Drive",
                event_type=EventType.COMMUNITY_SERVICE,
                start_at=start,
                end_at=start + timedelta(hours=2),
            )
        ]
    )
    container = build_container(store_backend="memory", catalog=catalog)
    tracker = container.attendance_tracker

    record = tracker.check_in("member-1", "community-service-001", now=start)
    print("reminders:", [r.to_dict() for r in container.reminder_scheduler.active_reminders(now=start)])

    closed = tracker.check_out("member-1", record.record_id, now=start + timedelta(minutes=125))
    print(closed.to_dict())
    print(tracker.get_streak("member-1", now=start + timedelta(hours=3)).to_dict())

    container.dispatcher.shutdown()


if __name__ == "__main__":
    main()
