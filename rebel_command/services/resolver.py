"""Choice resolution — the per-session campaign state machine.

A session is ``InProgress(phase)`` for phases 1-4.  Completing a phase moves
it to the next one; completing the last phase, or taking a fatal branch in
any phase, makes it terminal.  Terminal sessions reject every further choice.

Resolution works on a copy of the ledger: nothing on the session changes
until the whole step has succeeded, so rejected choices and invariant
violations leave the session exactly as it was.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

from rebel_command.errors import (
    GameAlreadyOverError,
    InsufficientCreditsError,
    InvalidChoiceError,
)
from rebel_command.models.game import GameOption
from rebel_command.models.ledger import ResourceLedger
from rebel_command.models.session import Session
from rebel_command.services.catalog import CAMPAIGN, PhaseCatalog
from rebel_command.services.endings import Ending, classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Next state of a session, computed but not yet committed."""

    ledger: ResourceLedger
    phase: int
    game_over: bool
    last_result: str
    ending: Ending | None
    options: list[GameOption]
    phase_description: str


class ChoiceResolver:
    def __init__(self, catalog: PhaseCatalog = CAMPAIGN) -> None:
        self.catalog = catalog

    def begin(self, session_id: str, commander_name: str, ledger: ResourceLedger | None = None) -> Session:
        """Create a session at phase 1 with its opening options."""
        ledger = ledger if ledger is not None else ResourceLedger()
        return Session(
            session_id=session_id,
            commander_name=commander_name,
            ledger=ledger,
            options=self.catalog.options_for(1, ledger),
            phase_description=self.catalog.description_for(1, ledger),
        )

    def resolve(self, session: Session, option_id: int) -> Resolution:
        """Compute the effect of choosing *option_id* without touching *session*."""
        if session.game_over:
            raise GameAlreadyOverError()

        offered = session.find_option(option_id)
        if offered is None:
            raise InvalidChoiceError(f"Invalid choice {option_id} for Phase {session.phase}")
        if not offered.available:
            raise InvalidChoiceError(f"'{offered.text}' is not available: {offered.requirement}")

        template = self.catalog.template(session.phase, option_id)
        if template is None:
            raise InvalidChoiceError(f"Invalid choice {option_id} for Phase {session.phase}")

        ledger = session.ledger.model_copy()
        if template.cost is not None:
            if ledger.credits < template.cost:
                raise InsufficientCreditsError(template.cost, ledger.credits)
            ledger.debit(template.cost)

        branch = template.select_branch(ledger)
        ledger.apply(branch.effects)
        ledger.ensure_progression_from(session.ledger)
        narrative = branch.render(ledger)

        phase = session.phase
        if branch.fatal:
            game_over = True
        else:
            if self.catalog.phase(phase).is_complete(ledger, branch):
                phase += 1
                logger.info("Session %s advanced to phase %d", session.session_id, phase)
            game_over = phase > self.catalog.final_phase

        if game_over:
            ending = classify(branch.outcome, ledger)
            logger.info("Session %s ended: %s", session.session_id, ending.label)
            return Resolution(
                ledger=ledger,
                phase=phase,
                game_over=True,
                last_result=ending.marker(narrative),
                ending=ending,
                options=[],
                phase_description=self.catalog.closing_description,
            )

        return Resolution(
            ledger=ledger,
            phase=phase,
            game_over=False,
            last_result=narrative,
            ending=None,
            options=self.catalog.options_for(phase, ledger),
            phase_description=self.catalog.description_for(phase, ledger),
        )

    def apply(self, session: Session, option_id: int) -> Session:
        """Resolve *option_id* and commit the result onto *session*.

        The caller must hold ``session.lock``.
        """
        resolution = self.resolve(session, option_id)
        session.ledger = resolution.ledger
        session.phase = resolution.phase
        session.game_over = resolution.game_over
        session.last_result = resolution.last_result
        session.ending = resolution.ending
        session.options = resolution.options
        session.phase_description = resolution.phase_description
        return session
