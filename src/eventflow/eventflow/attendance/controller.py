from __future__ import annotations

import io
import logging
import uuid

import qrcode
from flask import Flask, request, send_file, session
from PIL import Image, UnidentifiedImageError
from pyzbar.pyzbar import decode as pyzbar_decode

from ..common.web import fail, json_api, manager_required, ok, participant_required
from ..core.enums import Phase
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container
from ..events.controller import event_json
from ..reports.service import write_report_csv
from ..sync.console import EventConsole
from .scan import build_scan_payload
from .service import to_ui

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _console(event_id: int) -> EventConsole:
        manager_id = int(session["user_id"])
        console = container.views.get_console(manager_id, event_id)
        if console is None:
            event = container.event_service.get_event(event_id)
            console = container.views.open_console(manager_id, event)
        return console

    def _console_json(console: EventConsole) -> dict:
        return {
            "event": event_json(console.event),
            "phase": console.phase.value,
            "participants": [to_ui(p) for p in console.participants()],
        }

    def _self_view():
        token = session.get("participant_token")
        if not token:
            token = uuid.uuid4().hex
            session["participant_token"] = token
        return container.views.open_self_view(token, int(session["participant_id"]))

    def _enter_participant(participant_id: int, event_id: int) -> None:
        old_token = session.get("participant_token")
        if old_token:
            container.views.close_self_view(old_token)
        session["participant_id"] = participant_id
        session["participant_event_id"] = event_id
        session["participant_token"] = uuid.uuid4().hex

    # Manager console

    @app.route("/manager/events/<int:event_id>/participants", methods=["GET"], endpoint="console_participants")
    @manager_required
    @json_api
    def console_participants(event_id: int):
        return ok(**_console_json(_console(event_id)))

    @app.route("/manager/events/<int:event_id>/console/close", methods=["POST"], endpoint="console_close")
    @manager_required
    @json_api
    def console_close(event_id: int):
        closed = container.views.close_console(int(session["user_id"]), event_id)
        return ok(closed=closed)

    @app.route("/manager/events/<int:event_id>/phase", methods=["POST"], endpoint="console_phase")
    @manager_required
    @json_api
    def console_phase(event_id: int):
        data = request.get_json(silent=True) or request.form
        try:
            phase = Phase(data.get("phase", ""))
        except ValueError:
            raise ValidationError("Phase must be one of: " + ", ".join(p.value for p in Phase))
        console = _console(event_id)
        console.set_phase(phase)
        return ok(phase=console.phase.value)

    @app.route("/manager/events/<int:event_id>/checkout-toggle", methods=["POST"], endpoint="console_checkout_toggle")
    @manager_required
    @json_api
    def console_checkout_toggle(event_id: int):
        console = _console(event_id)
        event = console.toggle_checkout()
        return ok(event=event_json(event), phase=console.phase.value)

    @app.route("/manager/events/<int:event_id>/scan", methods=["POST"], endpoint="console_scan")
    @manager_required
    @json_api
    def console_scan(event_id: int):
        data = request.get_json(silent=True) or request.form
        code = (data.get("code") or "").strip()
        if not code:
            return fail("Scan code is empty", 400)

        updated = _console(event_id).handle_scan(code)
        # Rejected scans are not errors; the scanner just keeps going.
        return ok(applied=updated is not None, participant=to_ui(updated) if updated else None)

    @app.route("/manager/events/<int:event_id>/scan/image", methods=["POST"], endpoint="console_scan_image")
    @manager_required
    @json_api
    def console_scan_image(event_id: int):
        file = request.files.get("image")
        if not file:
            return fail("No image uploaded", 400)
        try:
            img = Image.open(file.stream).convert("RGB")
        except (UnidentifiedImageError, OSError):
            return fail("Uploaded file is not an image", 400)

        decoded = pyzbar_decode(img)
        if not decoded:
            return fail("No QR code found in the image", 400)

        console = _console(event_id)
        results = []
        for symbol in decoded:
            text = symbol.data.decode("utf-8", errors="replace").strip()
            updated = console.handle_scan(text)
            results.append({"code": text, "applied": updated is not None, "participant": to_ui(updated) if updated else None})
        return ok(results=results)

    @app.route(
        "/manager/events/<int:event_id>/participants/<int:participant_id>/delete",
        methods=["POST"],
        endpoint="console_delete_participant",
    )
    @manager_required
    @json_api
    def console_delete_participant(event_id: int, participant_id: int):
        data = request.get_json(silent=True) or request.form
        confirmed = str(data.get("confirm", "")).lower() in {"1", "true", "yes", "on"}
        removed = _console(event_id).delete_participant(participant_id, confirmed=confirmed)
        if removed is None:
            raise NotFoundError("Participant not found")
        return ok(removed=to_ui(removed))

    @app.route("/manager/events/<int:event_id>/report.csv", methods=["GET"], endpoint="console_report_csv")
    @manager_required
    @json_api
    def console_report_csv(event_id: int):
        data = container.report_service.build_event_report(event_id)
        return app.response_class(
            write_report_csv(data.rows),
            mimetype="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{data.filename}"'},
        )

    # Participant self-service

    @app.route("/events/<int:event_id>/register", methods=["POST"], endpoint="participant_register")
    @json_api
    def participant_register(event_id: int):
        data = request.get_json(silent=True) or request.form
        participant = container.registration_service.register(
            event_id,
            full_name=data.get("full_name", ""),
            student_id=data.get("student_id", ""),
            email=data.get("email", ""),
            phone=data.get("phone", ""),
        )
        _enter_participant(participant.participant_id, participant.event_id)
        return ok(participant=to_ui(participant)), 201

    @app.route("/events/<int:event_id>/login", methods=["POST"], endpoint="participant_login")
    @json_api
    def participant_login(event_id: int):
        data = request.get_json(silent=True) or request.form
        participant = container.registration_service.login(event_id, data.get("student_id", ""))
        _enter_participant(participant.participant_id, participant.event_id)
        return ok(participant=to_ui(participant))

    @app.route("/me", methods=["GET"], endpoint="participant_me")
    @participant_required
    @json_api
    def participant_me():
        view = _self_view()
        participant = view.participant
        if participant is None:
            raise NotFoundError("Your registration no longer exists")
        event = view.event
        return ok(
            participant=to_ui(participant),
            checkout_open=bool(event and event.is_open_for_checkout),
            event_name=event.name if event else None,
        )

    @app.route("/me/checkout", methods=["POST"], endpoint="participant_checkout")
    @participant_required
    @json_api
    def participant_checkout():
        updated = _self_view().self_checkout()
        return ok(participant=to_ui(updated))

    @app.route("/me/qr.png", methods=["GET"], endpoint="participant_qr")
    @participant_required
    @json_api
    def participant_qr():
        participant = container.registration_service.get_participant(int(session["participant_id"]))
        if participant is None:
            raise NotFoundError("Your registration no longer exists")

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(build_scan_payload(participant.student_id, participant.event_id))
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        buf.seek(0)
        return send_file(buf, mimetype="image/png")

    @app.route("/me/exit", methods=["POST"], endpoint="participant_exit")
    @json_api
    def participant_exit():
        token = session.pop("participant_token", None)
        if token:
            container.views.close_self_view(token)
        session.pop("participant_id", None)
        session.pop("participant_event_id", None)
        return ok()
