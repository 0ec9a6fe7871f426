import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "event_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

STORE_BACKEND = "memory"
EVENTS_FILE = None

AUTO_INIT_DB = False

REMINDERS_ENABLED = True
REMINDER_INTERVALS = "30,15,5"
REMINDER_MOTIVATION = True
REMINDER_DEADLINE_ALERT = True

MISSED_CHECKOUT_CUTOFF_MINUTES = 60

TELEMETRY_ENABLED = False
