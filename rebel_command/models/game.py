"""Wire models — the JSON shapes consumed by the frontend.

Field names and optionality mirror the frontend's ``types.ts``; ``None``
fields are dropped when serialised so that ``cost``, ``requirement`` and
``last_action_result`` are present only when they apply.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class GameOption(BaseModel):
    """One option as offered to a specific session."""

    id: int
    text: str
    description: str
    icon: str
    cost: int | None = Field(default=None, ge=0)
    requirement: str | None = None
    available: bool = True


class GameState(BaseModel):
    """Snapshot of a session, as returned by every engine operation."""

    game_id: str
    commander_name: str
    reputation: int
    force_points: int
    credits: int
    ships_available: int
    pilots_available: int
    current_phase: int
    leia_rescued: bool
    death_star_plans: bool
    obi_wan_alive: bool
    game_over: bool
    preparations_made: int
    current_options: list[GameOption] = Field(default_factory=list)
    phase_description: str = ""
    last_action_result: str | None = None


class CreateGameRequest(BaseModel):
    commander_name: str


class MakeChoiceRequest(BaseModel):
    choice: int


class ApiResponse(BaseModel, Generic[T]):
    """``{success, data?, error?}`` envelope wrapped around every response."""

    success: bool
    data: T | None = None
    error: str | None = None

    @classmethod
    def ok(cls, data: T) -> ApiResponse[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> ApiResponse[T]:
        return cls(success=False, error=error)
