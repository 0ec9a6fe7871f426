from __future__ import annotations

import atexit
import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.logging_utils import configure_logging
from .common.telemetry import LoggingTelemetry, NullTelemetry
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .events.controller import register as register_events
from .reminders.controller import register as register_reminders
from .reminders.model import ReminderConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(*, container: Optional[Container] = None, start_scheduler: bool = True) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    store_backend = str(getattr(settings, "STORE_BACKEND", "mysql")).lower()
    db_config = getattr(settings, "DB_CONFIG", {})
    logger.info("Settings %s, store backend %s", settings_module, store_backend)

    if container is None:
        if store_backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        telemetry = LoggingTelemetry() if getattr(settings, "TELEMETRY_ENABLED", False) else NullTelemetry()
        container = build_container(
            db_config=db_config,
            store_backend=store_backend,
            events_file=getattr(settings, "EVENTS_FILE", None) or None,
            reminder_config=ReminderConfig.from_settings(settings),
            telemetry=telemetry,
            missed_checkout_cutoff_minutes=int(getattr(settings, "MISSED_CHECKOUT_CUTOFF_MINUTES", 60)),
        )

    app.extensions["event_attendance"] = container

    register_attendance(app, container)
    register_reminders(app, container)
    register_events(app, container)

    if start_scheduler:
        container.reminder_scheduler.start()
        atexit.register(container.reminder_scheduler.shutdown)

    return app
