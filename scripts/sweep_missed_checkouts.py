"""Close attendance records whose event ended without a checkout.

Meant for cron, e.g. every 15 minutes:
    python scripts/sweep_missed_checkouts.py --cutoff 60
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path
from typing import Optional

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.event_attendance.event_attendance.common.logging_utils import configure_logging
from src.event_attendance.event_attendance.container import build_container
from src.event_attendance.event_attendance.reminders.model import ReminderConfig


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--cutoff",
        type=int,
        default=int(getattr(settings, "MISSED_CHECKOUT_CUTOFF_MINUTES", 60)),
        help="minutes after event end before an open record counts as missed",
    )
    parser.add_argument("--prune", action="store_true", help="also delete reminders that already fired")
    args = parser.parse_args(argv)

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        store_backend=getattr(settings, "STORE_BACKEND", "mysql"),
        events_file=getattr(settings, "EVENTS_FILE", None) or None,
        reminder_config=ReminderConfig.from_settings(settings),
    )

    swept = container.attendance_tracker.sweep_missed_checkouts(args.cutoff)
    print(f"OK: {swept} record(s) marked MISSED_CHECKOUT (cutoff={args.cutoff} min)")
    if args.prune:
        pruned = container.reminder_scheduler.prune_expired()
        print(f"OK: pruned {pruned} expired reminder(s)")
    container.dispatcher.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
