from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import EventStatus
from .model import Event


class EventRepository(Protocol):
    def get_by_id(self, event_id: int) -> Optional[Event]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Event]:
        """Newest first."""

        raise NotImplementedError

    def list_by_status(self, status: EventStatus) -> Sequence[Event]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        created_by: int,
        late_threshold: Optional[datetime],
        status: EventStatus = EventStatus.ACTIVE,
    ) -> int:
        raise NotImplementedError

    def set_checkout_open(self, event_id: int, *, is_open: bool) -> bool:
        raise NotImplementedError

    def set_status(self, event_id: int, *, status: EventStatus) -> bool:
        raise NotImplementedError

    def delete_by_id(self, event_id: int) -> bool:
        raise NotImplementedError
