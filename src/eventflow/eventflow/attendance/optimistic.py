from __future__ import annotations

import logging
from datetime import datetime
from functools import partial
from typing import Optional

from ..core.constants import LABEL_SELF_CHECKOUT
from ..core.enums import ParticipantStatus
from ..core.exceptions import DurableWriteError, NotFoundError, SelfCheckoutRejected
from ..events.model import Event
from .model import LogEntry, Participant
from .projection import LocalProjection
from .repository import ParticipantRepository
from .writer import WriteBehind

logger = logging.getLogger(__name__)


class OptimisticUpdateController:
    """Apply a status change locally first, then persist it.

    Operator scans are write-behind: the projection is updated before the
    durable write is even queued, and a failed write leaves the local state as
    it is until the next refresh replaces it. Self checkout writes through and
    rolls back, because no later scan would correct a wrong status.
    """

    def __init__(
        self,
        projection: LocalProjection,
        participants: ParticipantRepository,
        writer: Optional[WriteBehind] = None,
    ):
        self._projection = projection
        self._participants = participants
        self._writer = writer

    def apply(
        self,
        participant_id: int,
        next_status: ParticipantStatus,
        label: str,
        *,
        now: datetime | None = None,
    ) -> Optional[Participant]:
        current = self._projection.get(participant_id)
        if current is None:
            # Removed by a refresh between lookup and apply.
            return None

        updated = current.with_entry(next_status, LogEntry(label=label, time=now or datetime.now()))
        self._projection.put(updated)
        logger.info(
            "Participant %s (%s) %s -> %s [%s]",
            updated.participant_id,
            updated.student_id,
            current.status.value,
            updated.status.value,
            label,
        )

        self._submit(partial(self._persist, updated), on_error=partial(self._on_write_failed, updated))
        return updated

    def self_checkout(self, participant_id: int, event: Event, *, now: datetime | None = None) -> Participant:
        current = self._projection.get(participant_id)
        if current is None:
            raise NotFoundError("Participant not found")
        if not event.is_open_for_checkout:
            raise SelfCheckoutRejected("Checkout is not open for this event yet")
        if current.status == ParticipantStatus.BREAK:
            raise SelfCheckoutRejected("You are on break. Return first to checkout.")
        if current.status == ParticipantStatus.CHECKED_OUT:
            raise SelfCheckoutRejected("You have already checked out")

        updated = current.with_entry(
            ParticipantStatus.CHECKED_OUT,
            LogEntry(label=LABEL_SELF_CHECKOUT, time=now or datetime.now()),
        )
        self._projection.put(updated)

        try:
            saved = self._persist(updated)
        except Exception as exc:
            self._projection.put(current)
            logger.warning("Self checkout of participant %s not saved, reverted", participant_id, exc_info=True)
            raise DurableWriteError("Could not save to database. Please try again.") from exc

        if not saved:
            self._projection.put(current)
            raise DurableWriteError("Participant record no longer exists")

        logger.info("Participant %s (%s) checked out themselves", updated.participant_id, updated.student_id)
        return updated

    def remove(self, participant_id: int) -> Optional[Participant]:
        removed = self._projection.remove(participant_id)
        if removed is None:
            return None
        self._submit(
            partial(self._participants.delete_by_id, participant_id),
            on_error=partial(self._on_write_failed, removed),
        )
        return removed

    def _submit(self, task, *, on_error) -> None:
        if self._writer is not None:
            self._writer.submit(task, on_error=on_error)
            return
        # No writer: persist inline on the caller's thread.
        try:
            task()
        except Exception as exc:
            on_error(exc)

    def _persist(self, participant: Participant) -> bool:
        return self._participants.update_status_and_logs(
            participant_id=participant.participant_id,
            status=participant.status,
            logs=participant.logs,
        )

    @staticmethod
    def _on_write_failed(participant: Participant, exc: BaseException) -> None:
        # Local state stays as applied; the next refresh brings back the stored row.
        logger.warning(
            "Durable write for participant %s failed; keeping local state until next refresh",
            participant.participant_id,
            exc_info=exc,
        )
