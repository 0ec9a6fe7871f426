import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "event_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")
EVENTS_FILE = os.getenv("EVENTS_FILE")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

REMINDERS_ENABLED = bool(int(os.getenv("REMINDERS_ENABLED", "1")))
REMINDER_INTERVALS = os.getenv("REMINDER_INTERVALS", "30,15,5")
REMINDER_MOTIVATION = bool(int(os.getenv("REMINDER_MOTIVATION", "1")))
REMINDER_DEADLINE_ALERT = bool(int(os.getenv("REMINDER_DEADLINE_ALERT", "1")))

MISSED_CHECKOUT_CUTOFF_MINUTES = int(os.getenv("MISSED_CHECKOUT_CUTOFF_MINUTES", "60"))

TELEMETRY_ENABLED = bool(int(os.getenv("TELEMETRY_ENABLED", "0")))
