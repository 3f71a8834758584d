from __future__ import annotations

from datetime import datetime

import pytest

from tests.fakes import InMemoryEvents, InMemoryJournal, InMemoryParticipants


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 1, 9, 0, 0)


@pytest.fixture
def journal() -> InMemoryJournal:
    return InMemoryJournal()


@pytest.fixture
def participants(journal) -> InMemoryParticipants:
    return InMemoryParticipants(journal)


@pytest.fixture
def events() -> InMemoryEvents:
    return InMemoryEvents()
