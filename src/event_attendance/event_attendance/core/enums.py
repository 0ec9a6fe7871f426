from __future__ import annotations

from enum import Enum


class EventType(str, Enum):
    """Closed set of event tags; each one selects a row of the points table."""

    FFA_MEETING = "ffa_meeting"
    FFA_COMPETITION = "ffa_competition"
    FFA_CONFERENCE = "ffa_conference"
    LIVESTOCK_SHOW = "livestock_show"
    COUNTY_FAIR = "county_fair"
    STATE_FAIR = "state_fair"
    CAREER_DEVELOPMENT_EVENT = "career_development_event"
    LEADERSHIP_TRAINING = "leadership_training"
    COMMUNITY_SERVICE = "community_service"
    INDUSTRY_TOUR = "industry_tour"
    GUEST_SPEAKER = "guest_speaker"
    SKILLS_WORKSHOP = "skills_workshop"
    AGRICULTURE_EXPO = "agriculture_expo"
    VOLUNTEER_ACTIVITY = "volunteer_activity"
    INTERNSHIP = "internship"
    JOB_SHADOW = "job_shadow"
    COLLEGE_VISIT = "college_visit"
    SCHOLARSHIP_EVENT = "scholarship_event"
    AWARDS_BANQUET = "awards_banquet"
    OTHER = "other"


class AttendanceStatus(str, Enum):
    """Attendance lifecycle states stored with each record."""

    CHECKED_IN = "CHECKED_IN"
    VERIFIED = "VERIFIED"
    MISSED_CHECKOUT = "MISSED_CHECKOUT"
    INCOMPLETE = "INCOMPLETE"


class VerificationMethod(str, Enum):
    QR_CODE = "qr_code"
    LOCATION_BASED = "location_based"
    INSTRUCTOR_CODE = "instructor_code"
    SELF_REPORTED = "self_reported"
    PHOTO_VERIFICATION = "photo_verification"
    PEER_VERIFICATION = "peer_verification"


class DegreeLevel(str, Enum):
    DISCOVERY = "discovery"
    GREENHAND = "greenhand"
    CHAPTER = "chapter"
    STATE = "state"
    AMERICAN = "american"


class ReminderKind(str, Enum):
    CHECKOUT_REMINDER = "CHECKOUT_REMINDER"
    MOTIVATION = "MOTIVATION"
    DEADLINE_ALERT = "DEADLINE_ALERT"
