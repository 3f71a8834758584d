from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import ParticipantStatus, Phase
from .factory import PhaseStrategyFactory
from .strategies.base import TransitionDecision

_default_factory = PhaseStrategyFactory()


def transition(
    current: ParticipantStatus,
    phase: Phase,
    late_threshold: Optional[datetime],
    now: datetime,
    *,
    factory: Optional[PhaseStrategyFactory] = None,
) -> Optional[TransitionDecision]:
    """Next status and log label for a scan, or ``None`` when rejected.

    Pure: the same arguments always give the same answer, and nothing is
    written. Both the optimistic and the durable path go through here.
    """
    strategy = (factory or _default_factory).for_phase(phase)
    return strategy.decide(current=current, late_threshold=late_threshold, now=now)
