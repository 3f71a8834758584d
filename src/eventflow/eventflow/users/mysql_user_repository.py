from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_entry
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, email, password_hash, role, is_approved, created_at"


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        is_approved=bool(row.get("is_approved", 0)),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def create_user(self, *, email: str, password_hash: str, role: Role, is_approved: bool) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(email, password_hash, role, is_approved)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (email, password_hash, role.value, 1 if is_approved else 0),
                )
                return int(cur.lastrowid)
        except Exception as exc:
            if is_duplicate_entry(exc):
                raise ValidationError("An account with this email already exists") from exc
            raise

    def list_by_role(self, role: Role) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE role=%s ORDER BY created_at DESC, user_id DESC",
                (role.value,),
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def set_approved(self, user_id: int, *, is_approved: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET is_approved=%s WHERE user_id=%s",
                (1 if is_approved else 0, user_id),
            )
            return cur.rowcount > 0
