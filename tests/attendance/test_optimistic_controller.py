from datetime import timedelta

import pytest

from src.eventflow.eventflow.attendance.optimistic import OptimisticUpdateController
from src.eventflow.eventflow.attendance.projection import LocalProjection
from src.eventflow.eventflow.core.enums import ParticipantStatus
from src.eventflow.eventflow.core.exceptions import DurableWriteError, NotFoundError, SelfCheckoutRejected
from tests.fakes import InMemoryEvents, InMemoryParticipants, InlineWriter


def _controller(status=ParticipantStatus.PRESENT, *, checkout_open=True, writer=None):
    events = InMemoryEvents()
    participants = InMemoryParticipants()
    event = events.add("Orientation", is_open_for_checkout=checkout_open)
    p = participants.add(event_id=event.event_id, student_id="S1", full_name="Ben Cruz", status=status)
    projection = LocalProjection([p])
    return OptimisticUpdateController(projection, participants, writer), projection, participants, event, p


def test_apply_updates_projection_and_store(fixed_now):
    writer = InlineWriter()
    controller, projection, participants, _, p = _controller(ParticipantStatus.REGISTERED, writer=writer)

    controller.apply(p.participant_id, ParticipantStatus.PRESENT, "Time In", now=fixed_now)

    assert projection.get(p.participant_id).status == ParticipantStatus.PRESENT
    assert participants.get_by_id(p.participant_id).status == ParticipantStatus.PRESENT
    assert writer.submitted == 1


def test_operator_write_failure_keeps_local_state(fixed_now):
    controller, projection, participants, _, p = _controller(ParticipantStatus.REGISTERED)
    participants.fail_writes = True

    updated = controller.apply(p.participant_id, ParticipantStatus.PRESENT, "Time In", now=fixed_now)

    assert updated.status == ParticipantStatus.PRESENT
    assert projection.get(p.participant_id).status == ParticipantStatus.PRESENT
    assert participants.get_by_id(p.participant_id).status == ParticipantStatus.REGISTERED


def test_apply_to_missing_participant_is_noop(fixed_now):
    controller, _, participants, _, _ = _controller()
    assert controller.apply(999, ParticipantStatus.PRESENT, "Time In", now=fixed_now) is None
    assert participants.update_calls == []


def test_self_checkout_appends_and_persists(fixed_now):
    controller, projection, participants, event, p = _controller(ParticipantStatus.LATE)

    updated = controller.self_checkout(p.participant_id, event, now=fixed_now)

    assert updated.status == ParticipantStatus.CHECKED_OUT
    assert updated.logs[-1].label == "Self Checkout"
    assert participants.get_by_id(p.participant_id).status == ParticipantStatus.CHECKED_OUT


def test_self_checkout_rejected_while_on_break(fixed_now):
    controller, projection, participants, event, p = _controller(ParticipantStatus.BREAK)

    with pytest.raises(SelfCheckoutRejected):
        controller.self_checkout(p.participant_id, event, now=fixed_now)

    assert projection.get(p.participant_id).log_count == 0
    assert participants.update_calls == []


def test_self_checkout_rejected_when_not_open(fixed_now):
    controller, projection, _, event, p = _controller(ParticipantStatus.PRESENT, checkout_open=False)

    with pytest.raises(SelfCheckoutRejected):
        controller.self_checkout(p.participant_id, event, now=fixed_now)

    assert projection.get(p.participant_id).status == ParticipantStatus.PRESENT


def test_self_checkout_twice_is_rejected(fixed_now):
    controller, projection, _, event, p = _controller(ParticipantStatus.PRESENT)
    controller.self_checkout(p.participant_id, event, now=fixed_now)

    with pytest.raises(SelfCheckoutRejected):
        controller.self_checkout(p.participant_id, event, now=fixed_now + timedelta(seconds=5))
    assert projection.get(p.participant_id).log_count == 1


def test_self_checkout_reverts_on_write_failure(fixed_now):
    controller, projection, participants, event, p = _controller(ParticipantStatus.PRESENT)
    participants.fail_writes = True

    with pytest.raises(DurableWriteError):
        controller.self_checkout(p.participant_id, event, now=fixed_now)

    assert projection.get(p.participant_id) == p


def test_self_checkout_unknown_participant(fixed_now):
    controller, _, _, event, _ = _controller()
    with pytest.raises(NotFoundError):
        controller.self_checkout(42, event, now=fixed_now)


def test_remove_drops_row_and_deletes(fixed_now):
    controller, projection, participants, _, p = _controller()

    removed = controller.remove(p.participant_id)

    assert removed == p
    assert projection.get(p.participant_id) is None
    assert participants.get_by_id(p.participant_id) is None
