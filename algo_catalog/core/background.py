"""Periodic housekeeping threads.

Captcha expiry and rate limiter cleanup run on fixed intervals for the whole
process lifetime. Each job gets its own daemon thread; the app lifespan starts
them on startup and stops them on shutdown.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class PeriodicSweeper:
    """Call ``task`` every ``interval_seconds`` on a daemon thread until stopped."""

    def __init__(self, name: str, interval_seconds: float, task: Callable[[], object]) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.name = name
        self.interval_seconds = interval_seconds
        self._task = task
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> None:
        try:
            result = self._task()
        except Exception:
            # Keep the sweeper alive; the next tick may succeed.
            logger.exception("sweeper.task_failed", extra={"sweeper": self.name})
            return
        logger.debug("sweeper.tick", extra={"sweeper": self.name, "result": result})

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name=f"sweeper-{self.name}", daemon=True)
        self._thread.start()
        logger.info(
            "sweeper.started",
            extra={"sweeper": self.name, "interval_s": self.interval_seconds},
        )

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
