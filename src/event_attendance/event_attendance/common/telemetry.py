from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

logger = logging.getLogger(__name__)


class Telemetry(Protocol):
    """Fire-and-forget analytics sink."""

    def track(self, event_name: str, properties: Optional[Mapping[str, Any]] = None) -> None:
        raise NotImplementedError


class NullTelemetry:
    def track(self, event_name: str, properties: Optional[Mapping[str, Any]] = None) -> None:
        return None


class LoggingTelemetry:
    """Writes telemetry events to the application log."""

    def __init__(self, logger_name: str = "event_attendance.telemetry"):
        self._logger = logging.getLogger(logger_name)

    def track(self, event_name: str, properties: Optional[Mapping[str, Any]] = None) -> None:
        self._logger.info("%s %s", event_name, dict(properties or {}))


def track_safely(telemetry: Telemetry, event_name: str, **properties: Any) -> None:
    """Send a telemetry event without ever failing the caller."""
    try:
        telemetry.track(event_name, properties)
    except Exception:
        logger.debug("Telemetry event %s dropped", event_name, exc_info=True)
