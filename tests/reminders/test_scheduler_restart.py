from dataclasses import replace
from datetime import timedelta

from src.event_attendance.event_attendance.core.enums import AttendanceStatus
from src.event_attendance.event_attendance.reminders.service import ReminderScheduler

from conftest import RecordingDispatcher, RecordingNotifier


def _restart(reminder_repo, attendance_repo, now):
    dispatcher = RecordingDispatcher()
    notifier = RecordingNotifier()
    scheduler = ReminderScheduler(reminder_repo, attendance_repo, dispatcher, notifier=notifier, clock=lambda: now)
    return scheduler, dispatcher, notifier


def test_start_rearms_pending_reminders(tracker, attendance_repo, reminder_repo, fixed_now):
    record = tracker.check_in("member-1", "service-day", now=fixed_now)

    scheduler, dispatcher, notifier = _restart(reminder_repo, attendance_repo, fixed_now + timedelta(minutes=5))
    rearmed = scheduler.start()

    assert rearmed == 5
    assert len(dispatcher.armed) == 5
    assert {r.timer_handle for r in reminder_repo.list_all()} == set(dispatcher.armed)

    handle = next(iter(dispatcher.armed))
    assert dispatcher.fire(handle) is True
    assert notifier.sent[0].data["record_id"] == record.record_id


def test_start_prunes_reminders_that_expired_while_down(tracker, attendance_repo, reminder_repo, fixed_now):
    record = tracker.check_in("member-1", "service-day", now=fixed_now)

    # back up just after end-15: end-30, end-15 and the motivation are gone
    scheduler, dispatcher, _ = _restart(reminder_repo, attendance_repo, record.event_end_at - timedelta(minutes=14))
    rearmed = scheduler.start()

    assert rearmed == 2
    assert sorted(r.offset_minutes for r in reminder_repo.list_all()) == [-5, 5]


def test_start_removes_reminders_of_closed_records(tracker, attendance_repo, reminder_repo, fixed_now):
    record = tracker.check_in("member-1", "service-day", now=fixed_now)
    # closed by another process that never reached the reminder store
    attendance_repo.close_record(replace(record, status=AttendanceStatus.VERIFIED))

    scheduler, dispatcher, _ = _restart(reminder_repo, attendance_repo, fixed_now)

    assert scheduler.start() == 0
    assert reminder_repo.list_all() == []
    assert dispatcher.armed == {}


def test_shutdown_keeps_durable_reminders(tracker, scheduler, dispatcher, reminder_repo, fixed_now):
    tracker.check_in("member-1", "service-day", now=fixed_now)

    scheduler.shutdown()

    assert dispatcher.stopped
    assert len(reminder_repo.list_all()) == 5


def test_delivered_reminders_are_not_rearmed(tracker, scheduler, dispatcher, attendance_repo, reminder_repo, fixed_now):
    tracker.check_in("member-1", "service-day", now=fixed_now)
    dispatcher.fire(next(iter(dispatcher.armed)))

    restarted, new_dispatcher, _ = _restart(reminder_repo, attendance_repo, fixed_now)

    assert restarted.start() == 4
    assert len(new_dispatcher.armed) == 4
