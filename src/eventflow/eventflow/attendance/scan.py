from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from ..core.constants import SCAN_NAMESPACE_TAG, SCAN_PAYLOAD_DELIMITER
from ..core.enums import Phase
from ..events.model import Event
from .engine import transition
from .factory import PhaseStrategyFactory
from .model import Participant
from .projection import LocalProjection

if TYPE_CHECKING:
    from .optimistic import OptimisticUpdateController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanPayload:
    tag: str
    student_id: str
    event_id: str


@dataclass(frozen=True)
class ScanContext:
    """Everything a scan is interpreted against; passed explicitly per call."""

    event: Event
    phase: Phase
    projection: LocalProjection


def build_scan_payload(student_id: str, event_id: int) -> str:
    """Text rendered into a participant's pass code."""
    return SCAN_PAYLOAD_DELIMITER.join((SCAN_NAMESPACE_TAG, student_id, str(event_id)))


def parse_scan_payload(text: str) -> Optional[ScanPayload]:
    if not text:
        return None
    parts = [part.strip() for part in text.strip().split(SCAN_PAYLOAD_DELIMITER)]
    if len(parts) != 3 or not all(parts):
        return None
    return ScanPayload(tag=parts[0], student_id=parts[1], event_id=parts[2])


class ScanInterpreter:
    """Turn decoded scan text into a status change for one participant.

    Reads the local projection only; the change itself is handed to the
    optimistic update controller.
    """

    def __init__(
        self,
        controller: "OptimisticUpdateController",
        *,
        strategy_factory: PhaseStrategyFactory | None = None,
    ):
        self._controller = controller
        self._factory = strategy_factory or PhaseStrategyFactory()

    def handle(self, text: str, context: ScanContext, *, now: datetime | None = None) -> Optional[Participant]:
        payload = parse_scan_payload(text)
        if payload is None:
            logger.debug("Ignoring unparsable scan payload %r", text)
            return None
        if payload.tag != SCAN_NAMESPACE_TAG:
            logger.debug("Ignoring scan with foreign tag %r", payload.tag)
            return None
        if payload.event_id != str(context.event.event_id):
            logger.debug(
                "Ignoring scan for event %s on console of event %s", payload.event_id, context.event.event_id
            )
            return None

        participant = context.projection.find_by_code(payload.student_id)
        if participant is None:
            logger.debug("Ignoring unregistered code %r for event %s", payload.student_id, context.event.event_id)
            return None

        now = now or datetime.now()
        decision = transition(
            participant.status,
            context.phase,
            context.event.late_threshold,
            now,
            factory=self._factory,
        )
        if decision is None:
            return None

        return self._controller.apply(participant.participant_id, decision.status, decision.label, now=now)
