from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Phase
from .strategies.base import PhaseStrategy
from .strategies.break_strategy import BreakStrategy
from .strategies.checkin_strategy import CheckInStrategy
from .strategies.checkout_strategy import CheckOutStrategy


@dataclass
class PhaseStrategyFactory:
    """Factory Pattern: choose the transition rule for the active phase."""

    def for_phase(self, phase: Phase) -> PhaseStrategy:
        if phase == Phase.CHECK_IN:
            return CheckInStrategy()
        if phase == Phase.BREAK:
            return BreakStrategy()
        if phase == Phase.CHECK_OUT:
            return CheckOutStrategy()
        raise ValueError(f"Unsupported phase: {phase!r}")
