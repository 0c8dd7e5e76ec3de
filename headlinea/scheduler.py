"""Interval scheduling for automatic refreshes."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class _RepeatingTask(threading.Thread):
    """Daemon thread calling ``callback`` every ``interval`` seconds until cancelled."""

    def __init__(self, callback: Callable[[], object], interval: float, name: str):
        super().__init__(name=name, daemon=True)
        self._callback = callback
        self._interval = interval
        self._stop_event = threading.Event()

    def run(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                self._callback()
            except Exception:
                logger.exception("Scheduled refresh failed")

    def cancel(self) -> None:
        self._stop_event.set()

    @property
    def cancelled(self) -> bool:
        return self._stop_event.is_set()


class RefreshScheduler:
    """Own at most one repeating refresh timer.

    ``enable`` swaps any running timer for a fresh one under a lock, so two
    schedules never run side by side. ``trigger_now`` runs the callback on the
    caller's thread and leaves the timer phase untouched.
    """

    def __init__(
        self,
        callback: Callable[[], object],
        interval: float = 60.0,
        name: str = "headlinea-refresh",
    ):
        if interval <= 0:
            raise ValueError("Refresh interval must be positive.")
        self._callback = callback
        self._interval = interval
        self._name = name
        self._lock = threading.Lock()
        self._task: Optional[_RepeatingTask] = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def enabled(self) -> bool:
        task = self._task
        return task is not None and not task.cancelled

    def enable(self) -> None:
        with self._lock:
            self._cancel_locked()
            task = _RepeatingTask(self._callback, self._interval, self._name)
            task.start()
            self._task = task
        logger.info("Auto-refresh enabled every %.0f seconds", self._interval)

    def disable(self) -> None:
        with self._lock:
            was_enabled = self._task is not None
            self._cancel_locked()
        if was_enabled:
            logger.info("Auto-refresh disabled")

    def set_enabled(self, enabled: bool) -> None:
        if enabled:
            self.enable()
        else:
            self.disable()

    def trigger_now(self):
        logger.debug("Manual refresh requested")
        return self._callback()

    def _cancel_locked(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
