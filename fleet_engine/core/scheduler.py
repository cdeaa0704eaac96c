"""Cancellable periodic task running on a daemon thread."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Call *callback* every *interval* seconds until stopped.

    Ticks are best effort: a tick that is late (process suspended, slow
    callback) is not caught up.  An exception raised by the callback is
    logged and the loop keeps going.

    Attributes:
        interval: Seconds between ticks.
        name: Thread name, used in log messages.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], None],
        name: str = "periodic-task",
    ) -> None:
        if interval <= 0.0:
            raise ValueError("interval must be > 0.")
        self.interval: float = interval
        self.name: str = name
        self._callback = callback
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """Start ticking.  Calling ``start`` on a running task is a no-op."""
        with self._lock:
            if self.running:
                return
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name=self.name,
                daemon=True,
            )
            self._thread.start()
        logger.info("%s started (interval=%.1fs)", self.name, self.interval)

    def stop(self, timeout: float | None = None) -> None:
        """Stop ticking and wait for the worker thread to exit."""
        with self._lock:
            thread = self._thread
            self._stop_event.set()
            self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            logger.info("%s stopped", self.name)

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            try:
                self._callback()
            except Exception:
                logger.exception("%s tick failed", self.name)
