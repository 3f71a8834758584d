from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """A manager or admin account. Participants never have one."""

    user_id: int
    email: str
    password_hash: str
    role: Role
    is_approved: bool = False
    created_at: Optional[datetime] = None
