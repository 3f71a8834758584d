from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.constants import LABEL_TIME_OUT
from ...core.enums import ParticipantStatus
from .base import PhaseStrategy, TransitionDecision


class CheckOutStrategy(PhaseStrategy):
    """Operator time out. Unlike self checkout, a participant on break can be checked out."""

    def decide(
        self,
        *,
        current: ParticipantStatus,
        late_threshold: Optional[datetime],
        now: datetime,
    ) -> Optional[TransitionDecision]:
        if current == ParticipantStatus.CHECKED_OUT:
            return None
        return TransitionDecision(status=ParticipantStatus.CHECKED_OUT, label=LABEL_TIME_OUT)
