import pytest

from src.eventflow.eventflow.sync.console import EventConsole
from src.eventflow.eventflow.sync.feed import ChangeFeed
from src.eventflow.eventflow.sync.registry import ViewRegistry
from src.eventflow.eventflow.sync.self_view import ParticipantSelfView
from tests.fakes import InlineWriter


def _registry(participants, events, journal, **kwargs):
    feed = ChangeFeed(journal, poll_interval=0.05, autostart=False)
    registry = ViewRegistry(
        console_factory=lambda event: EventConsole(
            event, participants=participants, events=events, feed=feed, writer=InlineWriter()
        ),
        self_view_factory=lambda pid: ParticipantSelfView(
            pid, participants=participants, events=events, autostart=False
        ),
        **kwargs,
    )
    return registry, feed


def test_each_manager_gets_own_console(participants, events, journal):
    registry, feed = _registry(participants, events, journal)
    event = events.add("Orientation")

    a = registry.open_console(1, event)
    b = registry.open_console(2, event)

    assert a is not b
    assert registry.open_console(1, event) is a
    assert feed.subscription_count == 2


def test_close_event_and_owner(participants, events, journal):
    registry, feed = _registry(participants, events, journal)
    first = events.add("Orientation")
    second = events.add("Workshop")
    registry.open_console(1, first)
    registry.open_console(2, first)
    registry.open_console(1, second)

    assert registry.close_event(first.event_id) == 2
    assert registry.close_owner(1) == 1
    assert feed.subscription_count == 0


def test_self_view_per_token(participants, events, journal):
    registry, _ = _registry(participants, events, journal)
    event = events.add("Orientation")
    p1 = participants.add(event_id=event.event_id, student_id="S1", full_name="Ana")
    p2 = participants.add(event_id=event.event_id, student_id="S2", full_name="Ben")

    view = registry.open_self_view("tok", p1.participant_id)
    assert registry.open_self_view("tok", p1.participant_id) is view

    other = registry.open_self_view("tok", p2.participant_id)
    assert other is not view
    assert registry.get_self_view("tok").participant_id == p2.participant_id

    assert registry.close_self_view("tok") is True
    assert registry.get_self_view("tok") is None


def test_close_all(participants, events, journal):
    registry, feed = _registry(participants, events, journal)
    event = events.add("Orientation")
    p = participants.add(event_id=event.event_id, student_id="S1", full_name="Ana")
    registry.open_console(1, event)
    registry.open_self_view("tok", p.participant_id)

    registry.close_all()

    assert feed.subscription_count == 0
    assert registry.get_console(1, event.event_id) is None
    assert registry.get_self_view("tok") is None


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_idle_views_are_closed(participants, events, journal):
    clock = FakeClock()
    feed = ChangeFeed(journal, poll_interval=0.05, autostart=False)
    registry = ViewRegistry(
        console_factory=lambda event: EventConsole(
            event, participants=participants, events=events, feed=feed, writer=InlineWriter()
        ),
        self_view_factory=lambda pid: ParticipantSelfView(
            pid, participants=participants, events=events, poll_interval=30
        ),
        idle_timeout=300,
        clock=clock,
    )
    event = events.add("Orientation")
    p = participants.add(event_id=event.event_id, student_id="S1", full_name="Ana")
    console = registry.open_console(1, event)
    view = registry.open_self_view("tok", p.participant_id)
    assert view._poller.running

    clock.now += 299
    assert registry.sweep_idle() == 0
    assert registry.view_count == 2

    clock.now += 2
    assert registry.sweep_idle() == 2

    assert registry.view_count == 0
    assert not console.is_open
    assert feed.subscription_count == 0
    assert registry.get_self_view("tok") is None
    assert registry.get_console(1, event.event_id) is None
    assert not view._poller.running


def test_use_keeps_a_view_alive(participants, events, journal):
    clock = FakeClock()
    registry, feed = _registry(participants, events, journal, idle_timeout=300, clock=clock)
    event = events.add("Orientation")
    p = participants.add(event_id=event.event_id, student_id="S1", full_name="Ana")
    console = registry.open_console(1, event)
    registry.open_self_view("tok", p.participant_id)

    clock.now += 200
    assert registry.get_console(1, event.event_id) is console
    clock.now += 200

    # The lookup sweeps first: the untouched self view expires, the console stays.
    assert registry.get_self_view("tok") is None
    assert registry.get_console(1, event.event_id) is console
    assert feed.subscription_count == 1


def test_expired_console_is_reopened_on_next_visit(participants, events, journal):
    clock = FakeClock()
    registry, feed = _registry(participants, events, journal, idle_timeout=60, clock=clock)
    event = events.add("Orientation")
    first = registry.open_console(1, event)

    clock.now += 120
    second = registry.open_console(1, event)

    assert second is not first
    assert not first.is_open
    assert second.is_open
    assert feed.subscription_count == 1


def test_idle_timeout_must_be_positive(participants, events, journal):
    with pytest.raises(ValueError):
        _registry(participants, events, journal, idle_timeout=0)


def test_close_all_stops_sweeper(participants, events, journal):
    registry, _ = _registry(participants, events, journal)
    registry.start_sweeper(0.05)
    sweeper = registry._sweeper
    assert sweeper.running

    registry.close_all()

    assert not sweeper.running
