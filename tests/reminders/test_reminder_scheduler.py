from dataclasses import replace
from datetime import timedelta

import pytest

from src.event_attendance.event_attendance.attendance.model import AttendanceRecord
from src.event_attendance.event_attendance.core.enums import (
    AttendanceStatus,
    EventType,
    ReminderKind,
    VerificationMethod,
)
from src.event_attendance.event_attendance.core.exceptions import SchedulingFailure, ValidationError
from src.event_attendance.event_attendance.reminders.model import ReminderConfig
from src.event_attendance.event_attendance.reminders.service import ReminderScheduler

from conftest import RecordingDispatcher, RecordingNotifier, UnavailableReminderRepository


def _open_record(attendance_repo, now, *, record_id="rec-1", ends_in=120):
    record = AttendanceRecord(
        record_id=record_id,
        user_id="member-1",
        event_id="service-day",
        event_type=EventType.COMMUNITY_SERVICE,
        event_title="Food Bank Harvest Drive",
        event_end_at=now + timedelta(minutes=ends_in),
        checked_in_at=now,
        status=AttendanceStatus.CHECKED_IN,
        verification_method=VerificationMethod.SELF_REPORTED,
    )
    attendance_repo.create_checkin(record)
    return record


def test_schedule_plans_every_kind(scheduler, attendance_repo, fixed_now):
    record = _open_record(attendance_repo, fixed_now)

    reminders = scheduler.schedule(record)

    end = record.event_end_at
    planned = sorted((r.fire_at, r.kind) for r in reminders)
    assert planned == sorted(
        [
            (end - timedelta(minutes=30), ReminderKind.CHECKOUT_REMINDER),
            (end - timedelta(minutes=15), ReminderKind.CHECKOUT_REMINDER),
            (end - timedelta(minutes=5), ReminderKind.CHECKOUT_REMINDER),
            (end - timedelta(minutes=15), ReminderKind.MOTIVATION),
            (end + timedelta(minutes=5), ReminderKind.DEADLINE_ALERT),
        ]
    )
    assert all(r.timer_handle for r in reminders)


def test_schedule_skips_past_due_reminders(scheduler, attendance_repo, fixed_now):
    # ends in 10 minutes: only end-5 and end+5 are still ahead
    record = _open_record(attendance_repo, fixed_now, ends_in=10)

    reminders = scheduler.schedule(record)

    assert sorted(r.offset_minutes for r in reminders) == [-5, 5]


def test_schedule_is_idempotent(scheduler, attendance_repo, reminder_repo, dispatcher, fixed_now):
    record = _open_record(attendance_repo, fixed_now)

    scheduler.schedule(record)
    scheduler.schedule(record)

    assert len(reminder_repo.list_for_record(record.record_id)) == 5
    assert len(dispatcher.armed) == 5


def test_disabled_config_schedules_nothing(scheduler, attendance_repo, fixed_now):
    record = _open_record(attendance_repo, fixed_now)

    assert scheduler.schedule(record, ReminderConfig(enabled=False)) == []


def test_optional_kinds_can_be_switched_off(scheduler, attendance_repo, fixed_now):
    record = _open_record(attendance_repo, fixed_now)
    config = ReminderConfig(reminder_intervals=(20,), motivational_messages=False, deadline_alert=False)

    reminders = scheduler.schedule(record, config)

    assert [(r.kind, r.offset_minutes) for r in reminders] == [(ReminderKind.CHECKOUT_REMINDER, 20)]


def test_closed_record_gets_no_reminders(scheduler, attendance_repo, fixed_now):
    record = _open_record(attendance_repo, fixed_now)
    attendance_repo.close_record(replace(record, status=AttendanceStatus.VERIFIED))

    assert scheduler.schedule(record) == []


def test_stale_open_snapshot_after_close_schedules_nothing(scheduler, attendance_repo, reminder_repo, dispatcher, fixed_now):
    snapshot = _open_record(attendance_repo, fixed_now)
    scheduler.schedule(snapshot)
    attendance_repo.close_record(replace(snapshot, status=AttendanceStatus.VERIFIED))
    scheduler.cancel(snapshot.record_id)

    assert scheduler.schedule(snapshot) == []
    assert reminder_repo.list_for_record(snapshot.record_id) == []
    assert dispatcher.armed == {}


def test_unknown_record_gets_no_reminders(scheduler, reminder_repo, fixed_now):
    record = AttendanceRecord(
        record_id="never-saved",
        user_id="member-1",
        event_id="service-day",
        event_type=EventType.COMMUNITY_SERVICE,
        event_title="Food Bank Harvest Drive",
        event_end_at=fixed_now + timedelta(minutes=120),
        checked_in_at=fixed_now,
        status=AttendanceStatus.CHECKED_IN,
        verification_method=VerificationMethod.SELF_REPORTED,
    )

    assert scheduler.schedule(record) == []
    assert reminder_repo.list_all() == []


def test_invalid_interval_is_rejected():
    with pytest.raises(ValidationError):
        ReminderConfig(reminder_intervals=(0,))


def test_cancel_is_idempotent(scheduler, attendance_repo, fixed_now):
    record = _open_record(attendance_repo, fixed_now)
    scheduler.schedule(record)

    assert scheduler.cancel(record.record_id) == 5
    assert scheduler.cancel(record.record_id) == 0
    assert scheduler.cancel("never-scheduled") == 0


def test_schedule_then_prune_round_trip(scheduler, attendance_repo, reminder_repo, fixed_now):
    record = _open_record(attendance_repo, fixed_now)
    scheduler.schedule(record)

    removed = scheduler.prune_expired(record.event_end_at + timedelta(minutes=6))

    assert removed == 5
    assert reminder_repo.list_all() == []


def test_prune_before_first_fire_changes_nothing(scheduler, attendance_repo, reminder_repo, fixed_now):
    record = _open_record(attendance_repo, fixed_now)
    reminders = scheduler.schedule(record)
    before = sorted(reminder_repo.list_all(), key=lambda r: r.reminder_id)

    assert scheduler.prune_expired(min(r.fire_at for r in reminders) - timedelta(seconds=1)) == 0
    assert sorted(reminder_repo.list_all(), key=lambda r: r.reminder_id) == before


def test_prune_keeps_future_reminders(scheduler, attendance_repo, fixed_now):
    record = _open_record(attendance_repo, fixed_now)
    scheduler.schedule(record)

    removed = scheduler.prune_expired(record.event_end_at - timedelta(minutes=15))

    # end-30, end-15 and the motivation at end-15
    assert removed == 3
    assert len(scheduler.active_reminders(now=fixed_now)) == 2


def test_dispatcher_failure_still_persists_reminders(attendance_repo, reminder_repo, fixed_now):
    scheduler = ReminderScheduler(
        reminder_repo, attendance_repo, RecordingDispatcher(fail=True), clock=lambda: fixed_now
    )
    record = _open_record(attendance_repo, fixed_now)

    reminders = scheduler.schedule(record)

    assert len(reminders) == 5
    assert all(r.timer_handle is None for r in reminder_repo.list_all())


def test_dispatcher_failure_is_reported(attendance_repo, reminder_repo, telemetry, fixed_now):
    scheduler = ReminderScheduler(
        reminder_repo,
        attendance_repo,
        RecordingDispatcher(fail=True),
        telemetry=telemetry,
        clock=lambda: fixed_now,
    )
    record = _open_record(attendance_repo, fixed_now)

    scheduler.schedule(record)

    assert telemetry.names().count("reminder_arm_failed") == 5
    assert {props["record_id"] for name, props in telemetry.events if name == "reminder_arm_failed"} == {"rec-1"}


def test_persistence_failure_disarms_timers(attendance_repo, fixed_now):
    dispatcher = RecordingDispatcher()
    scheduler = ReminderScheduler(
        UnavailableReminderRepository(), attendance_repo, dispatcher, clock=lambda: fixed_now
    )
    record = _open_record(attendance_repo, fixed_now)

    with pytest.raises(SchedulingFailure):
        scheduler.schedule(record)

    assert dispatcher.armed == {}


def test_fired_reminder_is_delivered_once(scheduler, attendance_repo, dispatcher, notifier, fixed_now):
    record = _open_record(attendance_repo, fixed_now)
    reminders = scheduler.schedule(record)
    first = next(r for r in reminders if r.offset_minutes == 30)

    assert dispatcher.fire(first.timer_handle) is True
    assert scheduler.on_fire(first.payload()) is False

    assert len(notifier.sent) == 1
    assert notifier.sent[0].title == "Event Ending Soon"
    assert record.event_title in notifier.sent[0].body
    assert notifier.sent[0].data["record_id"] == record.record_id


def test_titles_follow_time_left(scheduler, attendance_repo, dispatcher, notifier, fixed_now):
    record = _open_record(attendance_repo, fixed_now)
    reminders = scheduler.schedule(record)

    for reminder in sorted(reminders, key=lambda r: (r.fire_at, r.kind.value)):
        dispatcher.fire(reminder.timer_handle)

    assert [n.title for n in notifier.sent] == [
        "Event Ending Soon",
        "Time to Wrap Up",
        "Making the Most of Your Event!",
        "Almost Time to Check Out",
        "Don't Forget Your Points!",
    ]


def test_fire_after_checkout_drops_stale_reminders(scheduler, attendance_repo, reminder_repo, dispatcher, notifier, fixed_now):
    record = _open_record(attendance_repo, fixed_now)
    reminders = scheduler.schedule(record)
    attendance_repo.close_record(replace(record, status=AttendanceStatus.VERIFIED))

    assert dispatcher.fire(reminders[0].timer_handle) is False
    assert notifier.sent == []
    assert reminder_repo.list_for_record(record.record_id) == []


def test_notifier_failure_leaves_reminder_pending(attendance_repo, reminder_repo, fixed_now):
    dispatcher = RecordingDispatcher()
    scheduler = ReminderScheduler(
        reminder_repo, attendance_repo, dispatcher, notifier=RecordingNotifier(fail=True), clock=lambda: fixed_now
    )
    dispatcher.bind(scheduler.on_fire)
    record = _open_record(attendance_repo, fixed_now)
    reminder = scheduler.schedule(record)[0]

    assert dispatcher.fire(reminder.timer_handle) is False
    assert not reminder_repo.list_for_record(record.record_id)[0].delivered


def test_stats(scheduler, attendance_repo, dispatcher, fixed_now):
    record = _open_record(attendance_repo, fixed_now)
    reminders = scheduler.schedule(record)
    wrap_up = next(r for r in reminders if r.kind == ReminderKind.CHECKOUT_REMINDER and r.offset_minutes == 15)
    dispatcher.fire(wrap_up.timer_handle)

    stats = scheduler.stats(now=record.event_end_at - timedelta(minutes=20))

    assert stats.total_scheduled == 5
    assert stats.expired_count == 1
    # delivered reminders are no longer active
    assert stats.active_reminders == 3


def test_update_config_applies_to_new_schedules(scheduler, attendance_repo, fixed_now):
    scheduler.update_config(ReminderConfig(reminder_intervals=(45,), motivational_messages=False, deadline_alert=False))
    record = _open_record(attendance_repo, fixed_now)

    assert [r.offset_minutes for r in scheduler.schedule(record)] == [45]
