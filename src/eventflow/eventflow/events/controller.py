from __future__ import annotations

from flask import Flask, request, session

from ..common.web import json_api, manager_required, ok
from ..core.enums import EventStatus
from ..container import Container
from .model import Event


def event_json(e: Event) -> dict:
    return {
        "event_id": e.event_id,
        "name": e.name,
        "created_by": e.created_by,
        "late_threshold": e.late_threshold.isoformat() if e.late_threshold else None,
        "is_open_for_checkout": e.is_open_for_checkout,
        "status": e.status.value,
        "created_at": e.created_at.isoformat() if e.created_at else None,
    }


def _confirmed() -> bool:
    data = request.get_json(silent=True) or request.form
    return str(data.get("confirm", "")).lower() in {"1", "true", "yes", "on"}


def register(app: Flask, container: Container) -> None:
    @app.route("/events", methods=["GET"], endpoint="public_events")
    @json_api
    def public_events():
        events = container.event_service.list_active_events()
        return ok(events=[{"event_id": e.event_id, "name": e.name} for e in events])

    @app.route("/manager/events", methods=["GET"], endpoint="manager_events")
    @manager_required
    @json_api
    def manager_events():
        return ok(events=[event_json(e) for e in container.event_service.list_events()])

    @app.route("/manager/events", methods=["POST"], endpoint="manager_create_event")
    @manager_required
    @json_api
    def manager_create_event():
        data = request.get_json(silent=True) or request.form
        event = container.event_service.create_event(
            name=data.get("name", ""),
            created_by=int(session["user_id"]),
            late_time=data.get("late_time") or None,
        )
        return ok(event=event_json(event)), 201

    @app.route("/manager/events/<int:event_id>/delete", methods=["POST"], endpoint="manager_delete_event")
    @manager_required
    @json_api
    def manager_delete_event(event_id: int):
        removed = container.event_service.delete_event(event_id, confirmed=_confirmed())
        container.views.close_event(event_id)
        return ok(participants_removed=removed)

    @app.route("/manager/events/<int:event_id>/open", methods=["POST"], endpoint="manager_open_event")
    @manager_required
    @json_api
    def manager_open_event(event_id: int):
        event = container.event_service.set_status(event_id, status=EventStatus.ACTIVE)
        return ok(event=event_json(event))

    @app.route("/manager/events/<int:event_id>/close", methods=["POST"], endpoint="manager_close_event")
    @manager_required
    @json_api
    def manager_close_event(event_id: int):
        event = container.event_service.set_status(event_id, status=EventStatus.CLOSED)
        return ok(event=event_json(event))
