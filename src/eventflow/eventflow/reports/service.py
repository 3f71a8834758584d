from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..attendance.model import LogEntry, Participant
from ..attendance.repository import ParticipantRepository
from ..common.datetime_utils import format_clock
from ..core.exceptions import NotFoundError
from ..events.model import Event
from ..events.repository import EventRepository

REPORT_FIELDS = [
    "student_id",
    "full_name",
    "email",
    "status",
    "time_in",
    "time_out",
    "total_logs",
]


@dataclass(frozen=True)
class ReportData:
    event: Event
    rows: list[dict]

    @property
    def filename(self) -> str:
        return f"{self.event.name}_Report.csv"


def first_time_in(logs: Sequence[LogEntry]) -> Optional[LogEntry]:
    for entry in logs:
        if "in" in entry.label.lower():
            return entry
    return None


def last_time_out(logs: Sequence[LogEntry]) -> Optional[LogEntry]:
    for entry in reversed(logs):
        label = entry.label.lower()
        if "out" in label or "checkout" in label:
            return entry
    return None


def report_row(p: Participant) -> dict:
    time_in = first_time_in(p.logs)
    time_out = last_time_out(p.logs)
    return {
        "student_id": p.student_id,
        "full_name": p.full_name,
        "email": p.email,
        "status": p.status.value,
        "time_in": format_clock(time_in.time if time_in else None),
        "time_out": format_clock(time_out.time if time_out else None),
        "total_logs": p.log_count,
    }


class ReportService:
    """Per-event attendance export, one row per participant."""

    def __init__(self, participants: ParticipantRepository, events: EventRepository):
        self._participants = participants
        self._events = events

    def build_event_report(self, event_id: int) -> ReportData:
        event = self._events.get_by_id(int(event_id))
        if not event:
            raise NotFoundError("Event not found")
        rows = [report_row(p) for p in self._participants.list_for_event(event.event_id)]
        return ReportData(event=event, rows=rows)


def write_report_csv(rows: Iterable[dict]) -> bytes:
    """Render report rows as CSV bytes (UTF-8 with BOM so spreadsheets pick the encoding)."""

    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS)
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return out.getvalue().encode("utf-8-sig")
