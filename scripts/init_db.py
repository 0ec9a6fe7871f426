"""Create the event attendance tables in the configured MySQL database.

    python scripts/init_db.py
    APP_ENV=production python scripts/init_db.py --schema database/schema.sql
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import Optional

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import mysql.connector
from dotenv import load_dotenv

from config import get_settings_module

from src.event_attendance.event_attendance.common.logging_utils import configure_logging
from src.event_attendance.event_attendance.database.bootstrap import apply_schema, list_tables

logger = logging.getLogger("scripts.init_db")

REQUIRED_TABLES = ("events", "attendance_records", "scheduled_reminders")


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--schema",
        type=Path,
        default=REPO_ROOT / "database" / "schema.sql",
        help="SQL file to apply",
    )
    args = parser.parse_args(argv)

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"

    try:
        apply_schema(db_config, schema_path=args.schema)
        tables = set(list_tables(db_config))
    except (OSError, mysql.connector.Error):
        logger.exception("Could not apply %s to %s", args.schema, target)
        return 1

    missing = [name for name in REQUIRED_TABLES if name not in tables]
    if missing:
        logger.error("Schema applied to %s but tables are missing: %s", target, ", ".join(missing))
        return 1
    logger.info("Attendance schema ready on %s (%d tables)", target, len(tables))
    return 0


if __name__ == "__main__":
    sys.exit(main())
