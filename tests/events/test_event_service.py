from datetime import datetime

import pytest

from src.eventflow.eventflow.core.enums import EventStatus
from src.eventflow.eventflow.core.exceptions import ConfirmationRequired, NotFoundError, ValidationError
from src.eventflow.eventflow.events.service import EventService


def test_create_event_with_late_time_on_creation_day(participants, events):
    svc = EventService(events, participants)

    event = svc.create_event(name="Orientation", created_by=3, late_time="09:15", now=datetime(2026, 3, 1, 7, 0))

    assert event.late_threshold == datetime(2026, 3, 1, 9, 15)
    assert event.created_by == 3
    assert event.status == EventStatus.ACTIVE
    assert event.is_open_for_checkout is False


def test_create_event_without_late_time(participants, events):
    event = EventService(events, participants).create_event(name="Orientation", created_by=1)
    assert event.late_threshold is None


def test_create_event_rejects_bad_late_time(participants, events):
    with pytest.raises(ValidationError):
        EventService(events, participants).create_event(name="Orientation", created_by=1, late_time="9am")


def test_create_event_requires_name(participants, events):
    with pytest.raises(ValidationError):
        EventService(events, participants).create_event(name="  ", created_by=1)


def test_close_event_hides_it_from_participants(participants, events):
    svc = EventService(events, participants)
    event = svc.create_event(name="Orientation", created_by=1)

    assert svc.set_status(event.event_id, status=EventStatus.CLOSED).status == EventStatus.CLOSED
    assert svc.list_active_events() == []


def test_delete_requires_confirmation(participants, events):
    svc = EventService(events, participants)
    event = svc.create_event(name="Orientation", created_by=1)
    participants.add(event_id=event.event_id, student_id="S1", full_name="Ana")

    with pytest.raises(ConfirmationRequired):
        svc.delete_event(event.event_id, confirmed=False)

    assert svc.get_event(event.event_id) == event
    assert len(participants.list_for_event(event.event_id)) == 1


def test_delete_cascades_to_participants(participants, events):
    svc = EventService(events, participants)
    event = svc.create_event(name="Orientation", created_by=1)
    keep = svc.create_event(name="Workshop", created_by=1)
    participants.add(event_id=event.event_id, student_id="S1", full_name="Ana")
    participants.add(event_id=event.event_id, student_id="S2", full_name="Ben")
    participants.add(event_id=keep.event_id, student_id="S1", full_name="Ana")

    assert svc.delete_event(event.event_id, confirmed=True) == 2

    with pytest.raises(NotFoundError):
        svc.get_event(event.event_id)
    assert len(participants.list_for_event(keep.event_id)) == 1
