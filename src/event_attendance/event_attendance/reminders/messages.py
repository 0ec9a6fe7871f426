"""Text for reminder notifications."""

from __future__ import annotations

from ..attendance.model import AttendanceRecord
from ..core.enums import ReminderKind
from .model import Notification, ScheduledReminder

_CHECKOUT_BODIES = (
    "{title} ends in {minutes} minutes. Don't forget to check out and earn your points!",
    "Your attendance at {title} is almost complete. Remember to check out to maximize your SAE/AET points!",
    "{minutes} minutes left at {title}. Check out soon to secure your points and reflect on what you learned!",
)

_MOTIVATION_BODIES = (
    "You're doing great at {title}! Stay engaged to maximize your learning and points.",
    "Make the most of these final minutes at {title}. Ask questions and connect with others!",
    "Almost time to complete {title}! Your participation is building valuable career skills.",
    "Strong finish ahead! Keep participating in {title} for maximum points and learning.",
)


def checkout_title(minutes_before: int) -> str:
    if minutes_before >= 30:
        return "Event Ending Soon"
    if minutes_before >= 15:
        return "Time to Wrap Up"
    return "Almost Time to Check Out"


def _pick(options: tuple[str, ...], seed: str) -> str:
    # Stable per reminder so a re-fired reminder repeats the same text.
    return options[sum(map(ord, seed)) % len(options)]


def build_notification(record: AttendanceRecord, reminder: ScheduledReminder) -> Notification:
    data = {
        "record_id": record.record_id,
        "event_title": record.event_title,
        "type": reminder.kind.value,
    }

    if reminder.kind == ReminderKind.CHECKOUT_REMINDER:
        body = _pick(_CHECKOUT_BODIES, reminder.reminder_id)
        return Notification(
            title=checkout_title(reminder.offset_minutes),
            body=body.format(title=record.event_title, minutes=reminder.offset_minutes),
            data=data,
        )

    if reminder.kind == ReminderKind.MOTIVATION:
        body = _pick(_MOTIVATION_BODIES, reminder.reminder_id)
        return Notification(
            title="Making the Most of Your Event!",
            body=body.format(title=record.event_title),
            data=data,
        )

    return Notification(
        title="Don't Forget Your Points!",
        body=f"Check out of {record.event_title} now to earn your SAE/AET points!",
        data=data,
    )


def immediate_checkout_notification(record: AttendanceRecord) -> Notification:
    return Notification(
        title="Ready to Check Out?",
        body=f"Complete your attendance at {record.event_title} and earn your points!",
        data={"record_id": record.record_id, "event_title": record.event_title, "type": "immediate_checkout"},
    )
