"""In-memory registry of live campaign sessions.

Each session carries its own lock; every read or mutation of a session runs
under that lock, so two choices on one session are applied one after the
other in arrival order while different sessions never wait on each other.
The registry lock is held only while a new session is inserted.
"""

from __future__ import annotations

import logging
import threading
from uuid import uuid4

from rebel_command.errors import GameNotFoundError, InvalidInputError
from rebel_command.models.game import GameState
from rebel_command.models.session import Session
from rebel_command.services.endings import Ending
from rebel_command.services.resolver import ChoiceResolver

logger = logging.getLogger(__name__)

MAX_COMMANDER_NAME_LENGTH = 30


def validate_commander_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise InvalidInputError("Commander name cannot be empty")
    if len(cleaned) > MAX_COMMANDER_NAME_LENGTH:
        raise InvalidInputError(f"Commander name must be at most {MAX_COMMANDER_NAME_LENGTH} characters")
    return cleaned


class SessionStore:
    def __init__(self, resolver: ChoiceResolver | None = None) -> None:
        self.resolver = resolver or ChoiceResolver()
        self._sessions: dict[str, Session] = {}
        self._registry_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, commander_name: str) -> str:
        name = validate_commander_name(commander_name)
        session = self.resolver.begin(uuid4().hex, name)
        with self._registry_lock:
            self._sessions[session.session_id] = session
        logger.info("Created session %s for commander %s", session.session_id, name)
        return session.session_id

    def _lookup(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise GameNotFoundError(session_id)
        return session

    def get(self, session_id: str) -> GameState:
        session = self._lookup(session_id)
        with session.lock:
            return session.snapshot()

    def apply(self, session_id: str, option_id: int) -> GameState:
        session = self._lookup(session_id)
        with session.lock:
            self.resolver.apply(session, option_id)
            return session.snapshot()

    def ending(self, session_id: str) -> Ending | None:
        """Classified ending of a finished session, ``None`` while it is running."""
        session = self._lookup(session_id)
        with session.lock:
            return session.ending
