import pytest
from flask import Flask
from werkzeug.security import generate_password_hash

from src.eventflow.eventflow.attendance.controller import register as register_attendance
from src.eventflow.eventflow.attendance.service import RegistrationService
from src.eventflow.eventflow.container import Container
from src.eventflow.eventflow.core.enums import ParticipantStatus, Role
from src.eventflow.eventflow.events.controller import register as register_events
from src.eventflow.eventflow.events.service import EventService
from src.eventflow.eventflow.reports.service import ReportService
from src.eventflow.eventflow.sync.console import EventConsole
from src.eventflow.eventflow.sync.feed import ChangeFeed
from src.eventflow.eventflow.sync.registry import ViewRegistry
from src.eventflow.eventflow.sync.self_view import ParticipantSelfView
from src.eventflow.eventflow.users.controller import register as register_users
from src.eventflow.eventflow.users.service import AuthService, UserService
from tests.fakes import InMemoryUsers, InlineWriter


@pytest.fixture
def wired(participants, events, journal):
    users = InMemoryUsers()
    users.create_user(
        email="admin@org.test", password_hash=generate_password_hash("admin123"), role=Role.ADMIN, is_approved=True
    )
    feed = ChangeFeed(journal, poll_interval=0.05, autostart=False)
    views = ViewRegistry(
        console_factory=lambda event: EventConsole(
            event, participants=participants, events=events, feed=feed, writer=InlineWriter()
        ),
        self_view_factory=lambda pid: ParticipantSelfView(
            pid, participants=participants, events=events, autostart=False
        ),
    )
    container = Container(
        conn=None,
        users_repo=users,
        events_repo=events,
        participants_repo=participants,
        auth_service=AuthService(users),
        user_service=UserService(users),
        event_service=EventService(events, participants),
        registration_service=RegistrationService(participants, events),
        report_service=ReportService(participants, events),
        feed=feed,
        views=views,
    )

    app = Flask(__name__)
    app.secret_key = "test-secret"
    register_users(app, container)
    register_events(app, container)
    register_attendance(app, container)
    yield app, container
    views.close_all()


def _login_admin(client):
    resp = client.post("/auth/login", json={"email": "admin@org.test", "password": "admin123"})
    assert resp.status_code == 200


def test_unapproved_manager_is_held_back(wired):
    app, _ = wired
    client = app.test_client()

    assert client.post("/auth/signup", json={"email": "lead@org.test", "password": "secret1"}).status_code == 201
    resp = client.get("/manager/events")

    assert resp.status_code == 403
    assert resp.get_json()["success"] is False


def test_approval_takes_effect_without_new_login(wired):
    app, container = wired
    manager = app.test_client()
    manager.post("/auth/signup", json={"email": "lead@org.test", "password": "secret1"})

    admin = app.test_client()
    _login_admin(admin)
    managers = admin.get("/admin/managers").get_json()["managers"]
    admin.post(f"/admin/managers/{managers[0]['user_id']}/approval", json={"approved": True})

    assert manager.get("/manager/events").status_code == 200


def test_duplicate_registration_is_409(wired, events):
    app, _ = wired
    event = events.add("Orientation")
    client = app.test_client()
    body = {"full_name": "Ana", "student_id": "S1", "email": "ana@school.test"}

    assert client.post(f"/events/{event.event_id}/register", json=body).status_code == 201
    resp = client.post(f"/events/{event.event_id}/register", json=body)

    assert resp.status_code == 409
    assert "log in" in resp.get_json()["message"]


def test_scan_and_report_flow(wired, events, participants):
    app, _ = wired
    client = app.test_client()
    _login_admin(client)
    event = client.post("/manager/events", json={"name": "Orientation"}).get_json()["event"]
    participants.add(event_id=event["event_id"], student_id="S1", full_name="Ana")

    resp = client.post(f"/manager/events/{event['event_id']}/scan", json={"code": f"EVENTFLOW:S1:{event['event_id']}"})
    assert resp.get_json()["applied"] is True

    resp = client.post(f"/manager/events/{event['event_id']}/scan", json={"code": "EVENTFLOW:S1:999"})
    assert resp.status_code == 200
    assert resp.get_json()["applied"] is False

    csv_resp = client.get(f"/manager/events/{event['event_id']}/report.csv")
    assert csv_resp.status_code == 200
    assert "Orientation_Report.csv" in csv_resp.headers["Content-Disposition"]
    assert b"present" in csv_resp.data


def test_delete_event_without_confirmation_is_400(wired, events):
    app, _ = wired
    client = app.test_client()
    _login_admin(client)
    event = events.add("Orientation")

    assert client.post(f"/manager/events/{event.event_id}/delete", json={}).status_code == 400
    assert events.get_by_id(event.event_id) is not None
    assert client.post(f"/manager/events/{event.event_id}/delete", json={"confirm": True}).status_code == 200
    assert events.get_by_id(event.event_id) is None


def test_self_checkout_rejected_while_on_break(wired, events, participants):
    app, _ = wired
    event = events.add("Orientation", is_open_for_checkout=True)
    participants.add(event_id=event.event_id, student_id="S1", full_name="Ana", status=ParticipantStatus.BREAK)
    client = app.test_client()

    assert client.post(f"/events/{event.event_id}/login", json={"student_id": "S1"}).status_code == 200
    resp = client.post("/me/checkout")

    assert resp.status_code == 400
    assert "break" in resp.get_json()["message"].lower()
