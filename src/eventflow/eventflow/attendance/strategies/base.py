from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import ParticipantStatus


@dataclass(frozen=True)
class TransitionDecision:
    status: ParticipantStatus
    label: str


class PhaseStrategy(ABC):
    """Strategy Pattern: the transition rule applied by one scanner phase.

    ``decide`` returns ``None`` when the scan is rejected. A rejection is an
    expected outcome (repeated or out-of-order scans), not an error.
    """

    @abstractmethod
    def decide(
        self,
        *,
        current: ParticipantStatus,
        late_threshold: Optional[datetime],
        now: datetime,
    ) -> Optional[TransitionDecision]:
        raise NotImplementedError
