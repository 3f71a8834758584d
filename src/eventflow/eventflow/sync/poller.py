from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicPoller:
    """Call ``action`` every ``interval`` seconds on a background thread until cancelled."""

    def __init__(self, action: Callable[[], object], *, interval: float, name: str = "eventflow-poller"):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._action = action
        self._interval = float(interval)
        self._name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()

    def start(self) -> "PeriodicPoller":
        if self._thread is not None:
            return self
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        return self

    def poll_once(self) -> bool:
        try:
            self._action()
            return True
        except Exception:
            logger.warning("%s: poll failed, retrying in %.1fs", self._name, self._interval, exc_info=True)
            return False

    def cancel(self) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(self._interval + 1)

    def __enter__(self) -> "PeriodicPoller":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.poll_once()
