"""Periodic timer that fires log rotation on a background thread."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_ROTATION_INTERVAL = 3600.0  # 1h


class RotationTimer:
    """Calls ``callback`` every ``interval_seconds`` until stopped.

    Usage:
        timer = RotationTimer(3600, engine.rotate)
        timer.start()
        # ... later ...
        timer.stop()
    """

    def __init__(self, interval_seconds: float, callback: Callable[[], object]) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._interval = interval_seconds
        self._callback = callback
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name="log-rotation")
        self._thread.start()
        logger.debug("Rotation timer started (every %.0fs)", self._interval)

    def stop(self, timeout: float | None = 10.0) -> None:
        """Stop the timer; a callback already running is allowed to finish."""
        self._stop_event.set()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
        self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                self._callback()
            except Exception:
                logger.exception("Log rotation failed")
