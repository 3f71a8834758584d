from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from ..core.constants import DEFAULT_VIEW_IDLE_SECONDS
from ..events.model import Event
from .console import EventConsole
from .poller import PeriodicPoller
from .self_view import ParticipantSelfView

logger = logging.getLogger(__name__)

ConsoleFactory = Callable[[Event], EventConsole]
SelfViewFactory = Callable[[int], ParticipantSelfView]


class ViewRegistry:
    """Live views held between HTTP requests.

    Consoles are keyed by (manager id, event id) so two managers on the same
    event each get their own projection. Self views are keyed by the
    participant's session token.

    A browser that is simply closed never says goodbye, so every view also
    records when it was last used; views idle for longer than
    ``idle_timeout`` seconds are closed by :meth:`sweep_idle`, which runs on
    every lookup and, once :meth:`start_sweeper` is called, on a timer.
    """

    def __init__(
        self,
        *,
        console_factory: ConsoleFactory,
        self_view_factory: SelfViewFactory,
        idle_timeout: float = DEFAULT_VIEW_IDLE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if idle_timeout <= 0:
            raise ValueError("idle_timeout must be positive")
        self._console_factory = console_factory
        self._self_view_factory = self_view_factory
        self._idle_timeout = float(idle_timeout)
        self._clock = clock
        self._lock = threading.Lock()
        self._consoles: dict[tuple[int, int], EventConsole] = {}
        self._self_views: dict[str, ParticipantSelfView] = {}
        self._last_used: dict[object, float] = {}
        self._sweeper: Optional[PeriodicPoller] = None

    def _touch(self, key: object) -> None:
        self._last_used[key] = self._clock()

    def open_console(self, manager_id: int, event: Event) -> EventConsole:
        self.sweep_idle()
        key = (int(manager_id), int(event.event_id))
        with self._lock:
            console = self._consoles.get(key)
            if console is not None:
                self._touch(key)
                return console

        console = self._console_factory(event).open()
        with self._lock:
            existing = self._consoles.setdefault(key, console)
            self._touch(key)
        if existing is not console:
            # Lost a race with another request for the same key.
            console.close()
        return existing

    def get_console(self, manager_id: int, event_id: int) -> Optional[EventConsole]:
        self.sweep_idle()
        key = (int(manager_id), int(event_id))
        with self._lock:
            console = self._consoles.get(key)
            if console is not None:
                self._touch(key)
            return console

    def close_console(self, manager_id: int, event_id: int) -> bool:
        key = (int(manager_id), int(event_id))
        with self._lock:
            console = self._consoles.pop(key, None)
            self._last_used.pop(key, None)
        if console is None:
            return False
        console.close()
        return True

    def close_event(self, event_id: int) -> int:
        """Close every console on ``event_id``, e.g. after the event is deleted."""
        with self._lock:
            keys = [k for k in self._consoles if k[1] == int(event_id)]
            consoles = [self._pop_console(k) for k in keys]
        for console in consoles:
            console.close()
        return len(consoles)

    def open_self_view(self, token: str, participant_id: int) -> ParticipantSelfView:
        self.sweep_idle()
        with self._lock:
            view = self._self_views.get(token)
            if view is not None and view.participant_id == int(participant_id):
                self._touch(token)
                return view
        if view is not None:
            self.close_self_view(token)

        view = self._self_view_factory(int(participant_id))
        with self._lock:
            self._self_views[token] = view
            self._touch(token)
        return view

    def get_self_view(self, token: str) -> Optional[ParticipantSelfView]:
        self.sweep_idle()
        with self._lock:
            view = self._self_views.get(token)
            if view is not None:
                self._touch(token)
            return view

    def close_self_view(self, token: str) -> bool:
        with self._lock:
            view = self._self_views.pop(token, None)
            self._last_used.pop(token, None)
        if view is None:
            return False
        view.close()
        return True

    def close_owner(self, manager_id: int) -> int:
        with self._lock:
            keys = [k for k in self._consoles if k[0] == int(manager_id)]
            consoles = [self._pop_console(k) for k in keys]
        for console in consoles:
            console.close()
        return len(consoles)

    def sweep_idle(self) -> int:
        """Close views not used within the idle timeout. Returns how many were closed."""
        cutoff = self._clock() - self._idle_timeout
        with self._lock:
            stale_consoles = [k for k in self._consoles if self._last_used.get(k, cutoff) < cutoff]
            stale_views = [t for t in self._self_views if self._last_used.get(t, cutoff) < cutoff]
            consoles = [self._pop_console(k) for k in stale_consoles]
            views = [self._pop_self_view(t) for t in stale_views]

        for console in consoles:
            try:
                console.close()
            except Exception:
                logger.exception("Closing idle console for event %s failed", console.event.event_id)
        for view in views:
            view.close()
        if consoles or views:
            logger.info("Closed %d idle consoles and %d idle self views", len(consoles), len(views))
        return len(consoles) + len(views)

    def start_sweeper(self, interval: float) -> None:
        if self._sweeper is None:
            self._sweeper = PeriodicPoller(self.sweep_idle, interval=interval, name="eventflow-view-sweeper").start()

    @property
    def view_count(self) -> int:
        with self._lock:
            return len(self._consoles) + len(self._self_views)

    def close_all(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()
            self._sweeper = None
        with self._lock:
            consoles = list(self._consoles.values())
            views = list(self._self_views.values())
            self._consoles.clear()
            self._self_views.clear()
            self._last_used.clear()
        for console in consoles:
            try:
                console.close()
            except Exception:
                logger.exception("Closing console for event %s failed", console.event.event_id)
        for view in views:
            view.close()
        logger.info("Closed %d consoles and %d self views", len(consoles), len(views))

    # Callers hold self._lock.

    def _pop_console(self, key: tuple[int, int]) -> EventConsole:
        self._last_used.pop(key, None)
        return self._consoles.pop(key)

    def _pop_self_view(self, token: str) -> ParticipantSelfView:
        self._last_used.pop(token, None)
        return self._self_views.pop(token)
