from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from ..core.constants import DEFAULT_FEED_POLL_SECONDS
from ..core.enums import ChangeOp
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeNotification:
    change_id: int
    event_id: int
    participant_id: int
    op: ChangeOp


ChangeCallback = Callable[[ChangeNotification], None]


class ChangeJournal(Protocol):
    def latest_change_id(self) -> int:
        raise NotImplementedError

    def changes_since(self, change_id: int, *, limit: int = 500) -> Sequence[ChangeNotification]:
        raise NotImplementedError


class MySQLChangeJournal(ChangeJournal):
    """Reads the trigger-maintained ``participant_changes`` table."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def latest_change_id(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COALESCE(MAX(change_id), 0) AS latest FROM participant_changes")
            row = fetchone(cur)
            return int(row["latest"]) if row else 0

    def changes_since(self, change_id: int, *, limit: int = 500) -> Sequence[ChangeNotification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT change_id, event_id, participant_id, op
                FROM participant_changes
                WHERE change_id > %s
                ORDER BY change_id ASC
                LIMIT %s
                """,
                (int(change_id), int(limit)),
            )
            return [
                ChangeNotification(
                    change_id=int(r["change_id"]),
                    event_id=int(r["event_id"]),
                    participant_id=int(r["participant_id"]),
                    op=ChangeOp(r["op"]),
                )
                for r in fetchall(cur)
            ]


class Subscription:
    """Handle for one feed subscription; release it with ``unsubscribe``."""

    def __init__(self, feed: "ChangeFeed", subscription_id: int, event_id: int, callback: ChangeCallback):
        self._feed = feed
        self.subscription_id = subscription_id
        self.event_id = event_id
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._feed._release(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()


class ChangeFeed:
    """Change notifications for participant rows, scoped per event.

    A single poller thread reads the change journal while at least one
    subscription is open. Notifications are delivered on that thread.
    """

    def __init__(
        self,
        journal: ChangeJournal,
        *,
        poll_interval: float = DEFAULT_FEED_POLL_SECONDS,
        autostart: bool = True,
    ):
        self._journal = journal
        self._poll_interval = float(poll_interval)
        self._autostart = autostart
        self._lock = threading.Lock()
        # Guards the watermark; held for a whole poll so one change is dispatched once.
        self._poll_lock = threading.RLock()
        self._subscriptions: dict[int, Subscription] = {}
        self._ids = itertools.count(1)
        self._watermark: Optional[int] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def subscribe(self, event_id: int, callback: ChangeCallback) -> Subscription:
        with self._lock:
            was_idle = not self._subscriptions
        with self._poll_lock:
            if was_idle or self._watermark is None:
                # Subscribers only see changes made after they joined.
                self._watermark = self._journal.latest_change_id()

        with self._lock:
            sub = Subscription(self, next(self._ids), int(event_id), callback)
            self._subscriptions[sub.subscription_id] = sub
            idle = self._thread is None or not self._thread.is_alive() or self._stop.is_set()
            if self._autostart and idle:
                self._stop = threading.Event()
                self._thread = threading.Thread(
                    target=self._run, args=(self._stop,), name="eventflow-change-feed", daemon=True
                )
                self._thread.start()

        logger.debug("Subscribed %s to changes of event %s", sub.subscription_id, event_id)
        return sub

    def _release(self, sub: Subscription) -> None:
        thread = None
        with self._lock:
            self._subscriptions.pop(sub.subscription_id, None)
            if not self._subscriptions:
                self._stop.set()
                thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            # A re-subscribe must not run next to a poller that is still finishing.
            thread.join(self._poll_interval * 2 + 1)
        logger.debug("Released subscription %s (event %s)", sub.subscription_id, sub.event_id)

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    @property
    def subscription_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def poll_once(self) -> int:
        """Read new journal rows and dispatch them. Returns notifications delivered."""

        with self._poll_lock:
            if self._watermark is None:
                self._watermark = self._journal.latest_change_id()
                return 0

            changes = self._journal.changes_since(self._watermark)
            if not changes:
                return 0
            self._watermark = changes[-1].change_id

            with self._lock:
                subs = list(self._subscriptions.values())

            delivered = 0
            for change in changes:
                for sub in subs:
                    if sub.event_id != change.event_id or not sub.active:
                        continue
                    try:
                        sub.callback(change)
                        delivered += 1
                    except Exception:
                        logger.exception("Change callback failed for subscription %s", sub.subscription_id)
            return delivered

    def close(self) -> None:
        with self._lock:
            subs = list(self._subscriptions.values())
        for sub in subs:
            sub.unsubscribe()
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(self._poll_interval * 2 + 1)

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self._poll_interval):
            try:
                self.poll_once()
            except Exception:
                # Store unreachable: keep the watermark and try again next tick.
                logger.warning("Change feed poll failed", exc_info=True)
