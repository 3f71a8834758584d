from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, request, session

from ..common.web import admin_required, json_api, login_required, ok
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from ..container import Container
from .model import User
from .service import SessionUser

logger = logging.getLogger(__name__)


def _user_json(u: User) -> dict:
    return {
        "user_id": u.user_id,
        "email": u.email,
        "role": u.role.value,
        "is_approved": u.is_approved,
        "created_at": u.created_at.isoformat() if u.created_at else None,
    }


def register(app: Flask, container: Container) -> None:
    def _start_session(s_user: SessionUser, *, remember: bool) -> None:
        session.permanent = bool(remember)
        app.permanent_session_lifetime = timedelta(days=7)
        session["user_id"] = s_user.user_id
        session["email"] = s_user.email
        session["role"] = s_user.role.value
        session["is_approved"] = s_user.is_approved

    @app.before_request
    def _refresh_pending_approval():
        # A manager waiting for approval picks it up on the next request.
        if session.get("role") != Role.MANAGER.value or session.get("is_approved"):
            return None
        try:
            s_user = container.auth_service.reload(int(session["user_id"]))
        except AuthenticationError:
            session.clear()
            return None
        session["is_approved"] = s_user.is_approved
        return None

    @app.route("/auth/signup", methods=["POST"], endpoint="signup")
    @json_api
    def signup():
        data = request.get_json(silent=True) or request.form
        s_user = container.auth_service.sign_up(data.get("email", ""), data.get("password", ""))
        _start_session(s_user, remember=False)
        return ok(user_id=s_user.user_id, is_approved=s_user.is_approved), 201

    @app.route("/auth/login", methods=["POST"], endpoint="login")
    @json_api
    def login():
        data = request.get_json(silent=True) or request.form
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        _start_session(s_user, remember=bool(data.get("remember_me")))
        logger.info("User %s logged in", s_user.email)
        return ok(user_id=s_user.user_id, role=s_user.role.value, is_approved=s_user.is_approved)

    @app.route("/auth/logout", methods=["POST"], endpoint="logout")
    @login_required
    def logout():
        container.views.close_owner(int(session["user_id"]))
        session.clear()
        return ok()

    @app.route("/admin/managers", methods=["GET"], endpoint="admin_managers")
    @admin_required
    @json_api
    def admin_managers():
        managers = container.user_service.list_managers()
        return ok(managers=[_user_json(u) for u in managers])

    @app.route("/admin/managers/<int:user_id>/approval", methods=["POST"], endpoint="admin_manager_approval")
    @admin_required
    @json_api
    def admin_manager_approval(user_id: int):
        data = request.get_json(silent=True) or request.form
        approved = str(data.get("approved", "true")).lower() in {"1", "true", "yes", "on"}
        user = container.user_service.set_approval(
            current_role=Role(session.get("role")),
            user_id=user_id,
            is_approved=approved,
        )
        return ok(user=_user_json(user))
