from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import ParticipantStatus
from .model import LogEntry, Participant


class ParticipantRepository(Protocol):
    """Durable store for participants.

    Note (DIP): services and views depend on this interface, not on MySQL.
    """

    def list_for_event(self, event_id: int) -> Sequence[Participant]:
        raise NotImplementedError

    def get_by_id(self, participant_id: int) -> Optional[Participant]:
        raise NotImplementedError

    def get_by_code(self, *, event_id: int, student_id: str) -> Optional[Participant]:
        raise NotImplementedError

    def insert(
        self,
        *,
        event_id: int,
        student_id: str,
        full_name: str,
        email: str,
        phone: str,
        status: ParticipantStatus,
        logs: Sequence[LogEntry] = (),
    ) -> Participant:
        """Raises DuplicateRegistrationError when the code is taken within the event."""

        raise NotImplementedError

    def update_status_and_logs(
        self,
        *,
        participant_id: int,
        status: ParticipantStatus,
        logs: Sequence[LogEntry],
    ) -> bool:
        """Write status and the full log array in one statement."""

        raise NotImplementedError

    def delete_by_id(self, participant_id: int) -> bool:
        raise NotImplementedError

    def delete_for_event(self, event_id: int) -> int:
        raise NotImplementedError
