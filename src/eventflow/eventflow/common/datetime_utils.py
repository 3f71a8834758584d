from __future__ import annotations

from datetime import date, datetime


def parse_hhmm_on(value: str, on: date) -> datetime:
    """Combine an 'HH:MM' wall-clock string with a date."""
    return datetime.combine(on, datetime.strptime(value.strip(), "%H:%M").time())


def to_iso(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds")


def from_iso(value: str) -> datetime:
    # Strip a trailing 'Z' written by browser clients.
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_clock(value: datetime | None) -> str:
    return value.strftime("%H:%M:%S") if value else "-"

