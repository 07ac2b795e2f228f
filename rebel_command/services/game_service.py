"""Engine operations exposed to the transport layer.

Each operation returns the ``{success, data?, error?}`` envelope.  Rejected
requests (:class:`CommandError`) become ``success=False`` with the error
message; anything else is a defect and propagates to the caller.
"""

from __future__ import annotations

import logging

from rebel_command.errors import CommandError
from rebel_command.models.game import ApiResponse, GameState
from rebel_command.services.session_store import SessionStore

logger = logging.getLogger(__name__)

_store = SessionStore()


def get_store() -> SessionStore:
    """FastAPI dependency returning the process-wide session store."""
    return _store


def create_game(commander_name: str, store: SessionStore | None = None) -> ApiResponse[GameState]:
    store = store if store is not None else _store
    try:
        session_id = store.create(commander_name)
        return ApiResponse[GameState].ok(store.get(session_id))
    except CommandError as exc:
        logger.info("Rejected new game for %r: %s", commander_name, exc)
        return ApiResponse[GameState].fail(str(exc))


def get_game(session_id: str, store: SessionStore | None = None) -> ApiResponse[GameState]:
    store = store if store is not None else _store
    try:
        return ApiResponse[GameState].ok(store.get(session_id))
    except CommandError as exc:
        logger.debug("Lookup of %s failed: %s", session_id, exc)
        return ApiResponse[GameState].fail(str(exc))


def make_choice(session_id: str, option_id: int, store: SessionStore | None = None) -> ApiResponse[GameState]:
    store = store if store is not None else _store
    try:
        return ApiResponse[GameState].ok(store.apply(session_id, option_id))
    except CommandError as exc:
        logger.info("Rejected choice %s for session %s: %s", option_id, session_id, exc)
        return ApiResponse[GameState].fail(str(exc))
    except Exception:
        logger.exception("Choice %s for session %s aborted", option_id, session_id)
        raise
