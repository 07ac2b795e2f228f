"""Resource ledger — the mutable numeric and narrative state of one campaign."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from rebel_command.errors import LedgerInvariantError

REPUTATION_MIN = 0
REPUTATION_MAX = 100

# Starting values for every new commander
STARTING_REPUTATION = 40
STARTING_FORCE_POINTS = 10
STARTING_CREDITS = 100
STARTING_SHIPS = 4
STARTING_PILOTS = 8


@dataclass(frozen=True)
class Effects:
    """Ledger changes applied together when an outcome branch is taken.

    Flags can only be *set* (``rescue_leia``, ``decode_plans``) or *cleared*
    (``lose_mentor``), so a branch has no way to express a reversal.
    """

    reputation: int = 0
    force_points: int = 0
    ships: int = 0
    pilots: int = 0
    preparations: int = 0
    rescue_leia: bool = False
    decode_plans: bool = False
    lose_mentor: bool = False


NO_EFFECTS = Effects()


def clamp_reputation(value: int) -> int:
    return max(REPUTATION_MIN, min(REPUTATION_MAX, value))


class ResourceLedger(BaseModel):
    """Numeric resources plus the three one-way narrative flags."""

    model_config = ConfigDict(validate_assignment=True)

    reputation: int = Field(default=STARTING_REPUTATION, ge=REPUTATION_MIN, le=REPUTATION_MAX)
    force_points: int = Field(default=STARTING_FORCE_POINTS, ge=0)
    credits: int = Field(default=STARTING_CREDITS, ge=0)
    ships_available: int = Field(default=STARTING_SHIPS, ge=0)
    pilots_available: int = Field(default=STARTING_PILOTS, ge=0)
    preparations_made: int = Field(default=0, ge=0)

    leia_rescued: bool = False
    death_star_plans: bool = False
    mentor_alive: bool = True

    def debit(self, amount: int) -> None:
        try:
            self.credits = self.credits - amount
        except ValidationError as exc:
            raise LedgerInvariantError(f"credits cannot go below zero (debit {amount})") from exc

    def apply(self, effects: Effects) -> None:
        """Apply *effects* in place; reputation is clamped, everything else must stay >= 0."""
        try:
            self.reputation = clamp_reputation(self.reputation + effects.reputation)
            self.force_points = self.force_points + effects.force_points
            self.ships_available = self.ships_available + effects.ships
            self.pilots_available = self.pilots_available + effects.pilots
            self.preparations_made = self.preparations_made + effects.preparations
        except ValidationError as exc:
            raise LedgerInvariantError(f"effects {effects} drove the ledger negative") from exc

        if effects.rescue_leia:
            self.leia_rescued = True
        if effects.decode_plans:
            self.death_star_plans = True
        if effects.lose_mentor:
            self.mentor_alive = False

    def ensure_progression_from(self, previous: ResourceLedger) -> None:
        """Raise if any one-way flag moved backwards relative to *previous*."""
        if previous.leia_rescued and not self.leia_rescued:
            raise LedgerInvariantError("leia_rescued cannot be reverted")
        if previous.death_star_plans and not self.death_star_plans:
            raise LedgerInvariantError("death_star_plans cannot be reverted")
        if not previous.mentor_alive and self.mentor_alive:
            raise LedgerInvariantError("mentor_alive cannot be restored")
