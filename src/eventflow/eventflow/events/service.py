from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..attendance.repository import ParticipantRepository
from ..common.datetime_utils import parse_hhmm_on
from ..common.validators import require_non_empty
from ..core.enums import EventStatus
from ..core.exceptions import ConfirmationRequired, NotFoundError, ValidationError
from .model import Event
from .repository import EventRepository

logger = logging.getLogger(__name__)


class EventService:
    """Use case: managers create, list, configure and delete events."""

    def __init__(self, events: EventRepository, participants: ParticipantRepository):
        self._events = events
        self._participants = participants

    def create_event(
        self,
        *,
        name: str,
        created_by: int,
        late_time: Optional[str] = None,
        now: datetime | None = None,
    ) -> Event:
        """Create an event; ``late_time`` is 'HH:MM' on the day of creation."""

        name = require_non_empty(name, "Event name")
        now = now or datetime.now()

        late_threshold = None
        if late_time and late_time.strip():
            try:
                late_threshold = parse_hhmm_on(late_time, now.date())
            except ValueError:
                raise ValidationError("Late time must be HH:MM")

        event_id = self._events.create(name=name, created_by=int(created_by), late_threshold=late_threshold)
        logger.info("Manager %s created event %s (%s)", created_by, event_id, name)
        return self.get_event(event_id)

    def get_event(self, event_id: int) -> Event:
        event = self._events.get_by_id(int(event_id))
        if not event:
            raise NotFoundError("Event not found")
        return event

    def list_events(self) -> Sequence[Event]:
        return self._events.list_all()

    def list_active_events(self) -> Sequence[Event]:
        return self._events.list_by_status(EventStatus.ACTIVE)

    def set_status(self, event_id: int, *, status: EventStatus) -> Event:
        event = self.get_event(event_id)
        self._events.set_status(event.event_id, status=status)
        return self.get_event(event.event_id)

    def delete_event(self, event_id: int, *, confirmed: bool) -> int:
        """Delete the event and every participant of it. Returns participants removed."""

        if not confirmed:
            raise ConfirmationRequired(
                "Deleting an event removes ALL of its participant records forever. Confirm to continue."
            )
        event = self.get_event(event_id)

        # Participants first so the change journal sees each removal.
        removed = self._participants.delete_for_event(event.event_id)
        self._events.delete_by_id(event.event_id)
        logger.warning("Deleted event %s (%s) and %d participants", event.event_id, event.name, removed)
        return removed
