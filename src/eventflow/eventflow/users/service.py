from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_email, require_min_length
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    email: str
    role: Role
    is_approved: bool


def _session_user(user: User) -> SessionUser:
    return SessionUser(user_id=user.user_id, email=user.email, role=user.role, is_approved=user.is_approved)


class AuthService:
    """Use case: manager sign-up and login."""

    def __init__(self, users: UserRepository):
        self._users = users

    def sign_up(self, email: str, password: str) -> SessionUser:
        """Create a manager account. It cannot manage events until an admin approves it."""

        email = require_email(email)
        require_min_length(password, "Password", 6)
        if self._users.get_by_email(email):
            raise ValidationError("An account with this email already exists")

        user_id = self._users.create_user(
            email=email,
            password_hash=generate_password_hash(password),
            role=Role.MANAGER,
            is_approved=False,
        )
        logger.info("Manager %s signed up, awaiting approval", email)
        return SessionUser(user_id=user_id, email=email, role=Role.MANAGER, is_approved=False)

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # Placeholder or corrupted hash in the table.
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")
        return _session_user(user)

    def reload(self, user_id: int) -> SessionUser:
        """Re-read the account so approval changes apply without a new login."""
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise AuthenticationError("Account no longer exists")
        return _session_user(user)


class UserService:
    """Use case: admins review manager accounts."""

    def __init__(self, users: UserRepository):
        self._users = users

    def list_managers(self) -> Sequence[User]:
        return self._users.list_by_role(Role.MANAGER)

    def set_approval(self, *, current_role: Role, user_id: int, is_approved: bool) -> User:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can approve managers")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("Account not found")
        if user.role == Role.ADMIN:
            raise ValidationError("Admin accounts are always approved")

        self._users.set_approved(user.user_id, is_approved=bool(is_approved))
        logger.info("Manager %s %s", user.email, "approved" if is_approved else "revoked")
        return self._users.get_by_id(user.user_id) or user
