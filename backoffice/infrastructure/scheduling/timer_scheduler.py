from __future__ import annotations

import logging
import threading
from typing import Callable

from backoffice.application.ports.scheduler import SchedulerPort


class TimerScheduler(SchedulerPort):
    """Deferred tasks on daemon threading.Timer instances, one per key."""

    def __init__(self) -> None:
        self._timers: dict[str, threading.Timer] = {}
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def schedule(self, key: str, delay_seconds: float, callback: Callable[[], None]) -> None:
        timer = threading.Timer(delay_seconds, self._run, args=(key, callback))
        timer.daemon = True
        with self._lock:
            previous = self._timers.pop(key, None)
            if previous is not None:
                previous.cancel()
            self._timers[key] = timer
        timer.start()

    def cancel(self, key: str) -> bool:
        with self._lock:
            timer = self._timers.pop(key, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def _run(self, key: str, callback: Callable[[], None]) -> None:
        with self._lock:
            if self._timers.get(key) is threading.current_thread():
                del self._timers[key]
        try:
            callback()
        except Exception as e:
            self._logger.exception("Scheduled task failed", extra={"chat_id": key, "error": str(e)})
