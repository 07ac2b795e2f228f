"""Engine error taxonomy.

Every :class:`CommandError` is a rejected request: nothing was mutated and the
session (if any) stays playable. :class:`LedgerInvariantError` is different:
it means the catalog produced an impossible ledger and the request is aborted.
"""

from __future__ import annotations


class CommandError(Exception):
    """Base class for recoverable, caller-facing engine errors."""


class InvalidInputError(CommandError):
    """Commander name is empty or too long."""


class GameNotFoundError(CommandError):
    def __init__(self, session_id: str) -> None:
        super().__init__("Game not found")
        self.session_id = session_id


class InvalidChoiceError(CommandError):
    """Option id is not on offer, or its requirement is unmet."""


class InsufficientCreditsError(CommandError):
    def __init__(self, cost: int, credits: int) -> None:
        super().__init__(f"Not enough credits: {cost} required, {credits} available")
        self.cost = cost
        self.credits = credits


class GameAlreadyOverError(CommandError):
    def __init__(self) -> None:
        super().__init__("Game is already over")


class LedgerInvariantError(Exception):
    """A choice tried to drive the ledger into an invalid state."""
