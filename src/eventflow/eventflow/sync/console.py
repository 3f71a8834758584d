from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from functools import partial
from typing import Optional

from ..attendance.factory import PhaseStrategyFactory
from ..attendance.model import Participant
from ..attendance.optimistic import OptimisticUpdateController
from ..attendance.projection import LocalProjection
from ..attendance.repository import ParticipantRepository
from ..attendance.scan import ScanContext, ScanInterpreter
from ..attendance.writer import WriteBehind
from ..core.constants import DEFAULT_WRITER_FLUSH_SECONDS
from ..core.enums import Phase
from ..core.exceptions import ConfirmationRequired
from ..events.model import Event
from ..events.repository import EventRepository
from .feed import ChangeFeed, ChangeNotification, Subscription

logger = logging.getLogger(__name__)


class EventConsole:
    """Manager detail view for one event.

    Holds the local participant projection and the operator's phase. While
    open it is subscribed to the event's change feed and replaces the whole
    projection from the store on every notification, whichever client caused
    the change. Use it as a context manager so the subscription and the writer
    are released on every exit path.
    """

    def __init__(
        self,
        event: Event,
        *,
        participants: ParticipantRepository,
        events: EventRepository,
        feed: ChangeFeed,
        writer: Optional[WriteBehind] = None,
        strategy_factory: PhaseStrategyFactory | None = None,
        phase: Phase | None = None,
    ):
        self._event = event
        self._participants = participants
        self._events = events
        self._feed = feed
        self._writer = writer
        self._projection = LocalProjection()
        self._controller = OptimisticUpdateController(self._projection, participants, writer)
        self._interpreter = ScanInterpreter(self._controller, strategy_factory=strategy_factory)
        self._phase = phase or (Phase.CHECK_OUT if event.is_open_for_checkout else Phase.CHECK_IN)
        self._subscription: Optional[Subscription] = None

    @property
    def event(self) -> Event:
        return self._event

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_open(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def set_phase(self, phase: Phase) -> None:
        self._phase = Phase(phase)

    def open(self) -> "EventConsole":
        if self.is_open:
            return self
        # Subscribe before the first fetch: a write landing in between then
        # shows up as a notification instead of being lost.
        self._subscription = self._feed.subscribe(self._event.event_id, self._on_change)
        try:
            self.refresh()
        except Exception:
            subscription, self._subscription = self._subscription, None
            subscription.unsubscribe()
            raise
        logger.info("Console opened for event %s (%s)", self._event.event_id, self._event.name)
        return self

    def close(self, *, flush_timeout: float = DEFAULT_WRITER_FLUSH_SECONDS) -> None:
        subscription, self._subscription = self._subscription, None
        try:
            if subscription is not None:
                subscription.unsubscribe()
        finally:
            if self._writer is not None:
                # Issued writes are never cancelled; wait for them before letting go.
                self._writer.close(flush_timeout)
        logger.info("Console closed for event %s", self._event.event_id)

    def __enter__(self) -> "EventConsole":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def refresh(self) -> int:
        rows = self._participants.list_for_event(self._event.event_id)
        self._projection.replace_all(rows)
        return len(rows)

    def participants(self) -> list[Participant]:
        return self._projection.snapshot()

    def handle_scan(self, text: str, *, now: datetime | None = None) -> Optional[Participant]:
        context = ScanContext(event=self._event, phase=self._phase, projection=self._projection)
        return self._interpreter.handle(text, context, now=now)

    def toggle_checkout(self) -> Event:
        """Open or close checkout; the scanner follows into check-out or back to check-in."""

        is_open = not self._event.is_open_for_checkout
        self._event = replace(self._event, is_open_for_checkout=is_open)
        self._phase = Phase.CHECK_OUT if is_open else Phase.CHECK_IN

        task = partial(self._events.set_checkout_open, self._event.event_id, is_open=is_open)
        if self._writer is not None:
            self._writer.submit(task, on_error=self._on_event_write_failed)
        else:
            try:
                task()
            except Exception as exc:
                self._on_event_write_failed(exc)
        return self._event

    def delete_participant(self, participant_id: int, *, confirmed: bool) -> Optional[Participant]:
        if not confirmed:
            raise ConfirmationRequired("Remove this participant? Confirm to continue.")
        removed = self._controller.remove(int(participant_id))
        if removed is not None:
            logger.info("Removed participant %s from event %s", removed.student_id, self._event.event_id)
        return removed

    def _on_change(self, change: ChangeNotification) -> None:
        logger.debug("Change %s on participant %s, refreshing event %s", change.op.value, change.participant_id, change.event_id)
        self.refresh()

    def _on_event_write_failed(self, exc: BaseException) -> None:
        logger.warning("Saving checkout flag of event %s failed", self._event.event_id, exc_info=exc)
