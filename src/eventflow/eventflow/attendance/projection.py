from __future__ import annotations

import threading
from typing import Iterable, Optional

from .model import Participant


class LocalProjection:
    """A view's local copy of participant rows.

    Owned by exactly one view. The lock exists because the refresh thread of
    that same view replaces the rows while scans read and update them.
    Row order is the order the store returned them in.
    """

    def __init__(self, participants: Iterable[Participant] = ()):
        self._lock = threading.Lock()
        self._rows: dict[int, Participant] = {p.participant_id: p for p in participants}

    def replace_all(self, participants: Iterable[Participant]) -> None:
        rows = {p.participant_id: p for p in participants}
        with self._lock:
            self._rows = rows

    def get(self, participant_id: int) -> Optional[Participant]:
        with self._lock:
            return self._rows.get(participant_id)

    def find_by_code(self, student_id: str) -> Optional[Participant]:
        with self._lock:
            for p in self._rows.values():
                if p.student_id == student_id:
                    return p
        return None

    def put(self, participant: Participant) -> None:
        with self._lock:
            self._rows[participant.participant_id] = participant

    def remove(self, participant_id: int) -> Optional[Participant]:
        with self._lock:
            return self._rows.pop(participant_id, None)

    def snapshot(self) -> list[Participant]:
        with self._lock:
            return list(self._rows.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)
