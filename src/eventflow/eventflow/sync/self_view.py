from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..attendance.model import Participant
from ..attendance.optimistic import OptimisticUpdateController
from ..attendance.projection import LocalProjection
from ..attendance.repository import ParticipantRepository
from ..core.constants import DEFAULT_SELF_VIEW_POLL_SECONDS
from ..core.exceptions import NotFoundError
from ..events.model import Event
from ..events.repository import EventRepository
from .poller import PeriodicPoller

logger = logging.getLogger(__name__)


class ParticipantSelfView:
    """A participant's own record, kept fresh by polling.

    There is no change subscription here; the row and the event's checkout
    flag are re-read every ``poll_interval`` seconds while the view is open.
    """

    def __init__(
        self,
        participant_id: int,
        *,
        participants: ParticipantRepository,
        events: EventRepository,
        poll_interval: float = DEFAULT_SELF_VIEW_POLL_SECONDS,
        autostart: bool = True,
    ):
        self._participant_id = int(participant_id)
        self._participants = participants
        self._events = events
        self._projection = LocalProjection()
        self._controller = OptimisticUpdateController(self._projection, participants)
        self._event: Optional[Event] = None
        self._poller = PeriodicPoller(
            self.refresh, interval=poll_interval, name=f"eventflow-self-view-{self._participant_id}"
        )
        self.refresh()
        if autostart:
            self._poller.start()

    @property
    def participant_id(self) -> int:
        return self._participant_id

    @property
    def participant(self) -> Optional[Participant]:
        return self._projection.get(self._participant_id)

    @property
    def event(self) -> Optional[Event]:
        return self._event

    def refresh(self) -> Optional[Participant]:
        row = self._participants.get_by_id(self._participant_id)
        if row is None:
            # Deleted by a manager; the view shows nothing from now on.
            self._projection.remove(self._participant_id)
            return None
        event = self._events.get_by_id(row.event_id)
        if event is not None:
            self._event = event
        self._projection.put(row)
        return row

    def self_checkout(self, *, now: datetime | None = None) -> Participant:
        if self._event is None or self.participant is None:
            raise NotFoundError("Participant not found")
        return self._controller.self_checkout(self._participant_id, self._event, now=now)

    def close(self) -> None:
        self._poller.cancel()
        logger.debug("Self view of participant %s closed", self._participant_id)

    def __enter__(self) -> "ParticipantSelfView":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
