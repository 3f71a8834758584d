from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Iterable, Optional

from ..common.datetime_utils import from_iso, to_iso
from ..core.enums import ParticipantStatus


@dataclass(frozen=True)
class LogEntry:
    """One status-changing action in a participant's audit trail."""

    label: str
    time: datetime

    def to_dict(self) -> dict[str, str]:
        # "type" is the key stored in the logs JSON column.
        return {"type": self.label, "time": to_iso(self.time)}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "LogEntry":
        return cls(label=str(raw["type"]), time=from_iso(str(raw["time"])))


@dataclass(frozen=True)
class Participant:
    """Domain entity: a registrant of one event.

    ``logs`` is append-only and kept in chronological (insertion) order. A new
    status is only produced together with the entry that explains it, see
    :meth:`with_entry`.
    """

    participant_id: int
    event_id: int
    student_id: str
    full_name: str
    email: str
    phone: str
    status: ParticipantStatus
    logs: tuple[LogEntry, ...] = ()
    created_at: Optional[datetime] = None

    def with_entry(self, status: ParticipantStatus, entry: LogEntry) -> "Participant":
        return replace(self, status=status, logs=self.logs + (entry,))

    @property
    def log_count(self) -> int:
        return len(self.logs)


def logs_to_json_ready(logs: Iterable[LogEntry]) -> list[dict[str, str]]:
    return [entry.to_dict() for entry in logs]


def logs_from_json_ready(raw: Optional[Iterable[dict[str, Any]]]) -> tuple[LogEntry, ...]:
    return tuple(LogEntry.from_dict(item) for item in (raw or []))
