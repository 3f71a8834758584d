from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .attendance.factory import PhaseStrategyFactory
from .attendance.mysql_participant_repository import MySQLParticipantRepository
from .attendance.service import RegistrationService
from .attendance.writer import BackgroundWriter
from .core.constants import (
    DEFAULT_FEED_POLL_SECONDS,
    DEFAULT_SELF_VIEW_POLL_SECONDS,
    DEFAULT_VIEW_IDLE_SECONDS,
    DEFAULT_VIEW_SWEEP_SECONDS,
)
from .database.connection import DBConfig, DatabaseConnection
from .events.model import Event
from .events.mysql_event_repository import MySQLEventRepository
from .events.service import EventService
from .reports.service import ReportService
from .sync.console import EventConsole
from .sync.feed import ChangeFeed, MySQLChangeJournal
from .sync.registry import ViewRegistry
from .sync.self_view import ParticipantSelfView
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    events_repo: MySQLEventRepository
    participants_repo: MySQLParticipantRepository

    auth_service: AuthService
    user_service: UserService
    event_service: EventService
    registration_service: RegistrationService
    report_service: ReportService

    feed: ChangeFeed
    views: ViewRegistry


def build_container(*, db_config: Mapping[str, Any], settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    feed_poll = float(getattr(settings, "FEED_POLL_SECONDS", DEFAULT_FEED_POLL_SECONDS))
    self_view_poll = float(getattr(settings, "SELF_VIEW_POLL_SECONDS", DEFAULT_SELF_VIEW_POLL_SECONDS))
    auto_time_in = bool(getattr(settings, "AUTO_TIME_IN_ON_REGISTRATION", False))
    view_idle = float(getattr(settings, "VIEW_IDLE_SECONDS", DEFAULT_VIEW_IDLE_SECONDS))
    view_sweep = float(getattr(settings, "VIEW_SWEEP_SECONDS", DEFAULT_VIEW_SWEEP_SECONDS))

    users_repo = MySQLUserRepository(conn)
    events_repo = MySQLEventRepository(conn)
    participants_repo = MySQLParticipantRepository(conn)
    strategy_factory = PhaseStrategyFactory()

    auth_service = AuthService(users_repo)
    user_service = UserService(users_repo)
    event_service = EventService(events_repo, participants_repo)
    registration_service = RegistrationService(
        participants_repo,
        events_repo,
        auto_time_in=auto_time_in,
        strategy_factory=strategy_factory,
    )
    report_service = ReportService(participants_repo, events_repo)

    feed = ChangeFeed(MySQLChangeJournal(conn), poll_interval=feed_poll)

    def console_factory(event: Event) -> EventConsole:
        return EventConsole(
            event,
            participants=participants_repo,
            events=events_repo,
            feed=feed,
            writer=BackgroundWriter(name=f"eventflow-writer-{event.event_id}"),
            strategy_factory=strategy_factory,
        )

    def self_view_factory(participant_id: int) -> ParticipantSelfView:
        return ParticipantSelfView(
            participant_id,
            participants=participants_repo,
            events=events_repo,
            poll_interval=self_view_poll,
        )

    views = ViewRegistry(
        console_factory=console_factory,
        self_view_factory=self_view_factory,
        idle_timeout=view_idle,
    )
    views.start_sweeper(view_sweep)

    return Container(
        conn=conn,
        users_repo=users_repo,
        events_repo=events_repo,
        participants_repo=participants_repo,
        auth_service=auth_service,
        user_service=user_service,
        event_service=event_service,
        registration_service=registration_service,
        report_service=report_service,
        feed=feed,
        views=views,
    )
