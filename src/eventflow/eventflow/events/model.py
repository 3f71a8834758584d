from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import EventStatus


@dataclass(frozen=True)
class Event:
    """Domain entity: a scheduled event owned by one manager."""

    event_id: int
    name: str
    created_by: int
    late_threshold: Optional[datetime] = None
    is_open_for_checkout: bool = False
    status: EventStatus = EventStatus.ACTIVE
    created_at: Optional[datetime] = None
