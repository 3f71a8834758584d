import pytest

from src.eventflow.eventflow.core.enums import ParticipantStatus
from src.eventflow.eventflow.core.exceptions import SelfCheckoutRejected
from src.eventflow.eventflow.sync.poller import PeriodicPoller
from src.eventflow.eventflow.sync.self_view import ParticipantSelfView


def _view(p, participants, events):
    return ParticipantSelfView(p.participant_id, participants=participants, events=events, autostart=False)


def test_refresh_picks_up_operator_changes(participants, events):
    event = events.add("Orientation")
    p = participants.add(event_id=event.event_id, student_id="S1", full_name="Ana")
    view = _view(p, participants, events)

    participants.update_status_and_logs(participant_id=p.participant_id, status=ParticipantStatus.PRESENT, logs=())
    assert view.participant.status == ParticipantStatus.REGISTERED

    view.refresh()
    assert view.participant.status == ParticipantStatus.PRESENT


def test_checkout_becomes_available_after_refresh(participants, events, fixed_now):
    event = events.add("Orientation")
    p = participants.add(event_id=event.event_id, student_id="S1", full_name="Ana", status=ParticipantStatus.PRESENT)
    view = _view(p, participants, events)

    with pytest.raises(SelfCheckoutRejected):
        view.self_checkout(now=fixed_now)

    events.set_checkout_open(event.event_id, is_open=True)
    view.refresh()
    updated = view.self_checkout(now=fixed_now)

    assert updated.status == ParticipantStatus.CHECKED_OUT
    assert participants.get_by_id(p.participant_id).logs[-1].label == "Self Checkout"


def test_participant_on_break_cannot_leave(participants, events, fixed_now):
    event = events.add("Orientation", is_open_for_checkout=True)
    p = participants.add(event_id=event.event_id, student_id="S1", full_name="Ana", status=ParticipantStatus.BREAK)

    with _view(p, participants, events) as view:
        with pytest.raises(SelfCheckoutRejected):
            view.self_checkout(now=fixed_now)
        assert participants.update_calls == []


def test_deleted_participant_disappears(participants, events):
    event = events.add("Orientation")
    p = participants.add(event_id=event.event_id, student_id="S1", full_name="Ana")
    view = _view(p, participants, events)

    participants.delete_by_id(p.participant_id)

    assert view.refresh() is None
    assert view.participant is None


def test_poller_survives_failures():
    calls = []

    def flaky():
        calls.append(1)
        raise ConnectionError("down")

    poller = PeriodicPoller(flaky, interval=10, name="test-poller")
    assert poller.poll_once() is False
    assert calls == [1]


def test_poller_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        PeriodicPoller(lambda: None, interval=0)
