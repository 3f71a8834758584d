from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.constants import LABEL_BREAK_RETURN, LABEL_BREAK_START
from ...core.enums import ParticipantStatus
from .base import PhaseStrategy, TransitionDecision


class BreakStrategy(PhaseStrategy):
    """Toggle break. Returning from break always lands on ``present``."""

    def decide(
        self,
        *,
        current: ParticipantStatus,
        late_threshold: Optional[datetime],
        now: datetime,
    ) -> Optional[TransitionDecision]:
        if current == ParticipantStatus.BREAK:
            return TransitionDecision(status=ParticipantStatus.PRESENT, label=LABEL_BREAK_RETURN)
        if current in (ParticipantStatus.PRESENT, ParticipantStatus.LATE):
            return TransitionDecision(status=ParticipantStatus.BREAK, label=LABEL_BREAK_START)
        return None
