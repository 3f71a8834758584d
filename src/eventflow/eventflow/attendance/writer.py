from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

WriteTask = Callable[[], object]
FailureHandler = Callable[[BaseException], None]


class WriteBehind(Protocol):
    def submit(self, task: WriteTask, *, on_error: Optional[FailureHandler] = None) -> None:
        raise NotImplementedError

    def flush(self, timeout: Optional[float] = None) -> bool:
        raise NotImplementedError

    def close(self, timeout: Optional[float] = None) -> None:
        raise NotImplementedError


class BackgroundWriter:
    """Runs durable writes off the caller's thread, one at a time, in order.

    Writes already submitted always run; ``close`` only stops accepting new
    ones once the queue has drained.
    """

    _STOP = object()

    def __init__(self, *, name: str = "eventflow-writer"):
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    def submit(self, task: WriteTask, *, on_error: Optional[FailureHandler] = None) -> None:
        with self._lock:
            if self._closed:
                raise RuntimeError("writer is closed")
            self._queue.put((task, on_error))

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait until every submitted write has finished. Returns False on timeout."""
        done = threading.Event()
        with self._lock:
            closed = self._closed
            if not closed:
                self._queue.put((done.set, None))
        if closed:
            # Everything queued before close runs ahead of the stop marker.
            self._thread.join(timeout)
            return not self._thread.is_alive()
        return done.wait(timeout)

    def close(self, timeout: Optional[float] = None) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(self._STOP)
        self._thread.join(timeout)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is self._STOP:
                    return
                task, on_error = item
                try:
                    task()
                except Exception as exc:
                    self._report(exc, on_error)
            finally:
                self._queue.task_done()

    @staticmethod
    def _report(exc: Exception, on_error: Optional[FailureHandler]) -> None:
        if on_error is None:
            logger.error("Background write failed", exc_info=exc)
            return
        try:
            on_error(exc)
        except Exception:
            logger.exception("Write failure handler raised")
