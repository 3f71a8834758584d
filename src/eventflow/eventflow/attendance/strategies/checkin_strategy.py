from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.constants import LABEL_LATE_TIME_IN_AUTO, LABEL_TIME_IN
from ...core.enums import ParticipantStatus
from .base import PhaseStrategy, TransitionDecision


def is_late(*, late_threshold: Optional[datetime], now: datetime) -> bool:
    # Strictly after the threshold; scanning exactly on it is on time.
    return late_threshold is not None and now > late_threshold


class CheckInStrategy(PhaseStrategy):
    """Time in from ``registered``; late once past the event's threshold."""

    def decide(
        self,
        *,
        current: ParticipantStatus,
        late_threshold: Optional[datetime],
        now: datetime,
    ) -> Optional[TransitionDecision]:
        if current != ParticipantStatus.REGISTERED:
            return None
        if is_late(late_threshold=late_threshold, now=now):
            return TransitionDecision(status=ParticipantStatus.LATE, label=LABEL_LATE_TIME_IN_AUTO)
        return TransitionDecision(status=ParticipantStatus.PRESENT, label=LABEL_TIME_IN)
