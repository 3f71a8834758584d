from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfirmationRequired,
    DomainError,
    DuplicateRegistrationError,
    DurableWriteError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = [
    (DuplicateRegistrationError, 409),
    (DurableWriteError, 503),
    (ConfirmationRequired, 400),
    (NotFoundError, 404),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (ValidationError, 400),
]


def status_for(exc: DomainError) -> int:
    for exc_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, exc_type):
            return status
    return 400


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def ok(**payload):
    return jsonify({"success": True, **payload})


def json_api(view):
    """Map domain errors to JSON failures; anything else is a logged 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return fail(str(e), status_for(e))
        except Exception:
            logger.exception("Unhandled error in %s", view.__name__)
            return fail("Internal server error", 500)

    return wrapper


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please log in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def manager_required(view):
    """Approved managers and admins only."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please log in to continue", 401)
        if session.get("role") == Role.ADMIN.value:
            return view(*args, **kwargs)
        if session.get("role") != Role.MANAGER.value:
            return fail("Forbidden", 403)
        if not session.get("is_approved"):
            return fail("Your account is pending admin approval", 403)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please log in to continue", 401)
        if session.get("role") != Role.ADMIN.value:
            return fail("Forbidden", 403)
        return view(*args, **kwargs)

    return wrapper


def participant_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "participant_id" not in session:
            return fail("Register or log in to an event first", 401)
        return view(*args, **kwargs)

    return wrapper
