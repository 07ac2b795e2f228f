"""Campaign endpoints — create a game, read its state, make a choice."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from rebel_command.models.game import ApiResponse, CreateGameRequest, GameState, MakeChoiceRequest
from rebel_command.services import game_service
from rebel_command.services.session_store import SessionStore

router = APIRouter(prefix="/api", tags=["game"])

Store = Annotated[SessionStore, Depends(game_service.get_store)]


@router.get("/test", response_model=ApiResponse[str], response_model_exclude_none=True)
async def test_route():
    """Liveness message for the frontend's connection check."""
    return ApiResponse[str].ok("API is working! Use POST /api/game/create to start")


@router.post("/game/create", response_model=ApiResponse[GameState], response_model_exclude_none=True)
async def create_game(body: CreateGameRequest, store: Store):
    """Start a new campaign for the given commander."""
    return game_service.create_game(body.commander_name, store)


@router.get("/game/{game_id}", response_model=ApiResponse[GameState], response_model_exclude_none=True)
async def get_game(game_id: str, store: Store):
    """Current state of a campaign."""
    return game_service.get_game(game_id, store)


@router.post("/game/{game_id}/choice", response_model=ApiResponse[GameState], response_model_exclude_none=True)
async def make_choice(game_id: str, body: MakeChoiceRequest, store: Store):
    """Apply one of the currently offered options."""
    return game_service.make_choice(game_id, body.choice, store)
