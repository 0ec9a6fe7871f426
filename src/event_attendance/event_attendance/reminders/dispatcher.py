from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime
from typing import Callable, Optional, Protocol

from ..common.datetime_utils import now_local
from ..core.exceptions import SchedulingFailure
from .model import ReminderPayload

logger = logging.getLogger(__name__)

FireHandler = Callable[[ReminderPayload], object]


class ReminderDispatcher(Protocol):
    """Timer executor. Best effort: the reminder store stays the source of truth."""

    def bind(self, handler: FireHandler) -> None:
        """Set the callback invoked with the payload when a timer fires."""

        raise NotImplementedError

    def register_timer(self, fire_at: datetime, payload: ReminderPayload) -> str:
        """Arm a timer and return its handle. Raises on platform errors."""

        raise NotImplementedError

    def cancel_timer(self, handle: str) -> None:
        """Disarm a timer; unknown handles are ignored."""

        raise NotImplementedError

    def shutdown(self) -> None:
        raise NotImplementedError


class ThreadingTimerDispatcher(ReminderDispatcher):
    """In-process timers, one ``threading.Timer`` per reminder.

    Timers die with the process; ReminderScheduler.start() re-arms them from
    the store on the next boot.
    """

    def __init__(self, *, clock: Callable[[], datetime] = now_local):
        self._clock = clock
        self._lock = threading.Lock()
        self._timers: dict[str, threading.Timer] = {}
        self._handler: Optional[FireHandler] = None

    def bind(self, handler: FireHandler) -> None:
        with self._lock:
            self._handler = handler

    def register_timer(self, fire_at: datetime, payload: ReminderPayload) -> str:
        with self._lock:
            if self._handler is None:
                raise SchedulingFailure("Dispatcher has no fire handler bound")

        delay = max(0.0, (fire_at - self._clock()).total_seconds())
        handle = uuid.uuid4().hex
        timer = threading.Timer(delay, self._fire, args=(handle, payload))
        timer.daemon = True
        with self._lock:
            self._timers[handle] = timer
        timer.start()
        logger.debug("Armed timer %s for reminder %s in %.0fs", handle, payload.reminder_id, delay)
        return handle

    def cancel_timer(self, handle: str) -> None:
        with self._lock:
            timer = self._timers.pop(handle, None)
        if timer is not None:
            timer.cancel()

    def pending_count(self) -> int:
        with self._lock:
            return len(self._timers)

    def shutdown(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        logger.info("Dispatcher stopped, %d pending timers cancelled", len(timers))

    def _fire(self, handle: str, payload: ReminderPayload) -> None:
        with self._lock:
            self._timers.pop(handle, None)
            handler = self._handler
        if handler is None:
            return
        try:
            handler(payload)
        except Exception:
            logger.exception("Reminder handler failed for reminder %s", payload.reminder_id)
