from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.validators import require_email, require_no_delimiter, require_non_empty
from ..core.constants import LABEL_TIME_IN, LABEL_TIME_IN_AUTO, SCAN_PAYLOAD_DELIMITER
from ..core.enums import EventStatus, ParticipantStatus, Phase
from ..core.exceptions import NotFoundError, ValidationError
from ..events.repository import EventRepository
from .engine import transition
from .factory import PhaseStrategyFactory
from .model import LogEntry, Participant, logs_to_json_ready
from .repository import ParticipantRepository

logger = logging.getLogger(__name__)


class RegistrationService:
    """Use case: participants register themselves and log back in by student id.

    Registration is the only way a participant row is created; scanning an
    unknown code never creates one.
    """

    def __init__(
        self,
        participants: ParticipantRepository,
        events: EventRepository,
        *,
        auto_time_in: bool = False,
        strategy_factory: PhaseStrategyFactory | None = None,
    ):
        self._participants = participants
        self._events = events
        self._auto_time_in = bool(auto_time_in)
        self._factory = strategy_factory or PhaseStrategyFactory()

    def register(
        self,
        event_id: int,
        *,
        full_name: str,
        student_id: str,
        email: str,
        phone: str = "",
        now: datetime | None = None,
    ) -> Participant:
        event = self._events.get_by_id(int(event_id))
        if not event:
            raise NotFoundError("Event not found")
        if event.status != EventStatus.ACTIVE:
            raise ValidationError("This event is not open for registration")

        full_name = require_non_empty(full_name, "Full name")
        student_id = require_non_empty(student_id, "Student ID")
        require_no_delimiter(student_id, "Student ID", SCAN_PAYLOAD_DELIMITER)
        email = require_email(email)
        phone = (phone or "").strip()

        status = ParticipantStatus.REGISTERED
        logs: tuple[LogEntry, ...] = ()
        if self._auto_time_in:
            now = now or datetime.now()
            decision = transition(
                ParticipantStatus.REGISTERED, Phase.CHECK_IN, event.late_threshold, now, factory=self._factory
            )
            if decision is not None:
                label = LABEL_TIME_IN_AUTO if decision.label == LABEL_TIME_IN else decision.label
                status = decision.status
                logs = (LogEntry(label=label, time=now),)

        participant = self._participants.insert(
            event_id=event.event_id,
            student_id=student_id,
            full_name=full_name,
            email=email,
            phone=phone,
            status=status,
            logs=logs,
        )
        logger.info("Registered %s for event %s as %s", student_id, event.event_id, status.value)
        return participant

    def login(self, event_id: int, student_id: str) -> Participant:
        student_id = require_non_empty(student_id, "Student ID")
        participant = self._participants.get_by_code(event_id=int(event_id), student_id=student_id)
        if not participant:
            raise NotFoundError("Student ID not found.")
        return participant

    def get_participant(self, participant_id: int) -> Optional[Participant]:
        return self._participants.get_by_id(int(participant_id))


def to_ui(p: Participant) -> dict:
    css = {
        ParticipantStatus.PRESENT: "bg-green-100 text-green-700",
        ParticipantStatus.LATE: "bg-yellow-100 text-yellow-700",
        ParticipantStatus.BREAK: "bg-orange-100 text-orange-700",
        ParticipantStatus.CHECKED_OUT: "bg-slate-100 text-slate-500",
    }.get(p.status, "bg-blue-50 text-blue-600")

    return {
        "participant_id": p.participant_id,
        "event_id": p.event_id,
        "student_id": p.student_id,
        "full_name": p.full_name,
        "email": p.email,
        "phone": p.phone,
        "status": p.status.value,
        "status_label": p.status.value.replace("_", " "),
        "css_class": css,
        "logs": logs_to_json_ready(p.logs),
    }
