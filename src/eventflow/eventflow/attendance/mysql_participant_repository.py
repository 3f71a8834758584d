from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import ParticipantStatus
from ..core.exceptions import DuplicateRegistrationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, is_duplicate_entry, load_json
from .model import LogEntry, Participant, logs_from_json_ready, logs_to_json_ready
from .repository import ParticipantRepository

_COLUMNS = "participant_id, event_id, student_id, full_name, email, phone, status, logs, created_at"


def _to_participant(r: dict[str, Any]) -> Participant:
    return Participant(
        participant_id=int(r["participant_id"]),
        event_id=int(r["event_id"]),
        student_id=r["student_id"],
        full_name=r["full_name"],
        email=r["email"],
        phone=r.get("phone") or "",
        status=ParticipantStatus(r["status"]),
        logs=logs_from_json_ready(load_json(r.get("logs"))),
        created_at=r.get("created_at"),
    )


class MySQLParticipantRepository(ParticipantRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_event(self, event_id: int) -> Sequence[Participant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM participants
                WHERE event_id=%s
                ORDER BY full_name ASC, participant_id ASC
                """,
                (int(event_id),),
            )
            return [_to_participant(r) for r in fetchall(cur)]

    def get_by_id(self, participant_id: int) -> Optional[Participant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM participants WHERE participant_id=%s", (int(participant_id),))
            r = fetchone(cur)
            return _to_participant(r) if r else None

    def get_by_code(self, *, event_id: int, student_id: str) -> Optional[Participant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM participants WHERE event_id=%s AND student_id=%s",
                (int(event_id), student_id),
            )
            r = fetchone(cur)
            return _to_participant(r) if r else None

    def insert(
        self,
        *,
        event_id: int,
        student_id: str,
        full_name: str,
        email: str,
        phone: str,
        status: ParticipantStatus,
        logs: Sequence[LogEntry] = (),
    ) -> Participant:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO participants(event_id, student_id, full_name, email, phone, status, logs)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (int(event_id), student_id, full_name, email, phone, status.value, dump_json(logs_to_json_ready(logs))),
                )
                participant_id = int(cur.lastrowid)
        except Exception as exc:
            if is_duplicate_entry(exc):
                raise DuplicateRegistrationError(
                    "This Student ID is already registered for the event. Please log in instead."
                ) from exc
            raise

        return Participant(
            participant_id=participant_id,
            event_id=int(event_id),
            student_id=student_id,
            full_name=full_name,
            email=email,
            phone=phone,
            status=status,
            logs=tuple(logs),
        )

    def update_status_and_logs(
        self,
        *,
        participant_id: int,
        status: ParticipantStatus,
        logs: Sequence[LogEntry],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE participants
                SET status=%s, logs=%s
                WHERE participant_id=%s
                """,
                (status.value, dump_json(logs_to_json_ready(logs)), int(participant_id)),
            )
            # rowcount is 0 when the values are unchanged; check existence separately.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM participants WHERE participant_id=%s", (int(participant_id),))
            return fetchone(cur) is not None

    def delete_by_id(self, participant_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM participants WHERE participant_id=%s", (int(participant_id),))
            return cur.rowcount > 0

    def delete_for_event(self, event_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM participants WHERE event_id=%s", (int(event_id),))
            return int(cur.rowcount)
