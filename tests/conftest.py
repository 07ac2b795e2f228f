from __future__ import annotations

from collections.abc import Callable, Iterable

from fastapi.testclient import TestClient
import pytest

from rebel_command.main import app
from rebel_command.models.game import GameState
from rebel_command.services import game_service
from rebel_command.services.resolver import ChoiceResolver
from rebel_command.services.session_store import SessionStore


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def resolver() -> ChoiceResolver:
    return ChoiceResolver()


@pytest.fixture
def play(store: SessionStore) -> Callable[[str, Iterable[int]], GameState]:
    """Apply a sequence of choices to a session and return the final state."""

    def _play(session_id: str, choices: Iterable[int]) -> GameState:
        state = store.get(session_id)
        for choice in choices:
            state = store.apply(session_id, choice)
        return state

    return _play


@pytest.fixture
def client(store: SessionStore):
    app.dependency_overrides[game_service.get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
