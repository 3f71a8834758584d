from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from ..core.enums import EventStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Event
from .repository import EventRepository

_COLUMNS = "event_id, name, created_by, late_threshold, is_open_for_checkout, status, created_at"


def _to_event(r: dict[str, Any]) -> Event:
    return Event(
        event_id=int(r["event_id"]),
        name=r["name"],
        created_by=int(r["created_by"]),
        late_threshold=r.get("late_threshold"),
        is_open_for_checkout=bool(r.get("is_open_for_checkout")),
        status=EventStatus(r["status"]),
        created_at=r.get("created_at"),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: int) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events WHERE event_id=%s", (int(event_id),))
            r = fetchone(cur)
            return _to_event(r) if r else None

    def list_all(self) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events ORDER BY created_at DESC, event_id DESC")
            return [_to_event(r) for r in fetchall(cur)]

    def list_by_status(self, status: EventStatus) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM events WHERE status=%s ORDER BY created_at DESC, event_id DESC",
                (status.value,),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        name: str,
        created_by: int,
        late_threshold: Optional[datetime],
        status: EventStatus = EventStatus.ACTIVE,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO events(name, created_by, late_threshold, status)
                VALUES(%s,%s,%s,%s)
                """,
                (name, int(created_by), late_threshold, status.value),
            )
            return int(cur.lastrowid)

    def set_checkout_open(self, event_id: int, *, is_open: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE events SET is_open_for_checkout=%s WHERE event_id=%s",
                (1 if is_open else 0, int(event_id)),
            )
            return cur.rowcount > 0

    def set_status(self, event_id: int, *, status: EventStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE events SET status=%s WHERE event_id=%s", (status.value, int(event_id)))
            return cur.rowcount > 0

    def delete_by_id(self, event_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM events WHERE event_id=%s", (int(event_id),))
            return cur.rowcount > 0
