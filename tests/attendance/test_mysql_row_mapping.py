import json
from datetime import datetime

from src.event_attendance.event_attendance.attendance.mysql_attendance_repository import row_to_record
from src.event_attendance.event_attendance.core.enums import AttendanceStatus, DegreeLevel, EventType, ReminderKind
from src.event_attendance.event_attendance.reminders.mysql_reminder_repository import row_to_reminder


def test_row_to_record_decodes_json_columns():
    row = {
        "record_id": "abc",
        "user_id": "member-1",
        "event_id": "service-day",
        "event_type": "community_service",
        "event_title": "Food Bank Harvest Drive",
        "event_end_at": datetime(2026, 3, 10, 12, 0),
        "checked_in_at": datetime(2026, 3, 10, 10, 0),
        "checked_out_at": datetime(2026, 3, 10, 12, 5),
        "status": "VERIFIED",
        "verification_method": "location_based",
        "verification_code": None,
        "duration_minutes": 125,
        "points_a": 12,
        "points_b": 6,
        "degree_credits": json.dumps(
            [
                {
                    "degree_level": "greenhand",
                    "requirement_category": "community_service",
                    "requirement_description": "Complete community service hours",
                    "points_earned": 2,
                    "completion_percentage": 20,
                }
            ]
        ),
        "location": b'{"latitude": 36.7, "longitude": -119.8, "address": null}',
        "check_in_notes": None,
        "reflection": {"overall_rating": 4, "skills_learned": ["sorting"]},
    }

    record = row_to_record(row)

    assert record.event_type == EventType.COMMUNITY_SERVICE
    assert record.status == AttendanceStatus.VERIFIED
    assert record.degree_credits[0].degree_level == DegreeLevel.GREENHAND
    assert record.location.longitude == -119.8
    assert record.reflection.skills_learned == ("sorting",)
    assert record.total_points == 18


def test_row_to_record_open_row():
    row = {
        "record_id": "abc",
        "user_id": "member-1",
        "event_id": "guest-talk",
        "event_type": "guest_speaker",
        "event_title": "Guest Talk",
        "event_end_at": datetime(2026, 3, 10, 11, 0),
        "checked_in_at": datetime(2026, 3, 10, 10, 0),
        "checked_out_at": None,
        "status": "CHECKED_IN",
        "verification_method": "self_reported",
        "duration_minutes": None,
        "points_a": 0,
        "points_b": 0,
        "degree_credits": None,
        "location": None,
        "reflection": None,
    }

    record = row_to_record(row)

    assert record.is_open
    assert record.duration_minutes is None
    assert record.degree_credits == ()


def test_row_to_reminder():
    reminder = row_to_reminder(
        {
            "reminder_id": "r1",
            "record_id": "abc",
            "fire_at": datetime(2026, 3, 10, 11, 30),
            "kind": "DEADLINE_ALERT",
            "offset_minutes": -5,
            "timer_handle": None,
            "delivered": 0,
        }
    )

    assert reminder.kind == ReminderKind.DEADLINE_ALERT
    assert reminder.delivered is False
