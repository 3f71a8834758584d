from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role in the identity store."""

    ADMIN = "admin"
    MANAGER = "manager"


class ParticipantStatus(str, Enum):
    """Attendance state of one participant, stored as-is in the database."""

    REGISTERED = "registered"
    PRESENT = "present"
    LATE = "late"
    BREAK = "break"
    CHECKED_OUT = "checked_out"


class Phase(str, Enum):
    """Scanner mode selected by the operator on a console."""

    CHECK_IN = "check-in"
    BREAK = "break"
    CHECK_OUT = "check-out"


class EventStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"


class ChangeOp(str, Enum):
    """Kind of row change recorded in the participant change journal."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
