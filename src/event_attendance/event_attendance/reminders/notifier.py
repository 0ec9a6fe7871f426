from __future__ import annotations

import logging
from typing import Protocol

from .model import Notification

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Delivers a notification to the member's device."""

    def send(self, notification: Notification) -> None:
        raise NotImplementedError


class LoggingNotifier:
    def send(self, notification: Notification) -> None:
        logger.info("Notification: %s - %s %s", notification.title, notification.body, notification.data)
