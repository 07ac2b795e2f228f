"""Ending classification — picks the named ending once a campaign is over.

The resolver hands over the terminal :class:`Outcome` tag of the branch that
ended the game together with the final ledger.  Rules are checked in order
and the first match wins:

1. heroic death           -> HEROIC SACRIFICE
2. any other death        -> DEFEAT
3. Force-guided strike    -> LEGENDARY FORCE VICTORY (force points >= threshold)
4. nothing lost, all won  -> PERFECT VICTORY
5. pilots or ships lost   -> COSTLY VICTORY
6. otherwise              -> VICTORY
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum, auto
import logging

from rebel_command.models.ledger import STARTING_PILOTS, STARTING_SHIPS, ResourceLedger

logger = logging.getLogger(__name__)

LEGENDARY_FORCE_THRESHOLD = 20
# Below either of these the fleet took losses during the campaign
PILOT_LOSS_THRESHOLD = STARTING_PILOTS
SHIP_LOSS_THRESHOLD = STARTING_SHIPS


class Outcome(StrEnum):
    """Terminal tag carried by a decisive or fatal branch."""

    STRIKE = auto()
    FORCE_STRIKE = auto()
    HEROIC_DEATH = auto()
    DEATH = auto()

    @property
    def fatal(self) -> bool:
        return self in (Outcome.HEROIC_DEATH, Outcome.DEATH)


class Ending(StrEnum):
    HEROIC_SACRIFICE = auto()
    DEFEAT = auto()
    LEGENDARY_FORCE_VICTORY = auto()
    PERFECT_VICTORY = auto()
    COSTLY_VICTORY = auto()
    VICTORY = auto()

    @property
    def label(self) -> str:
        return self.name.replace("_", " ")

    @property
    def details(self) -> EndingDetails:
        return ENDING_DETAILS[self]

    def marker(self, narrative: str) -> str:
        """Final ``last_action_result`` text, e.g. ``"🎉 PERFECT VICTORY! ..."``."""
        return f"{self.details.icon} {self.label}! {narrative}"


@dataclass(frozen=True)
class EndingDetails:
    icon: str
    title: str
    summary: str
    victorious: bool


ENDING_DETAILS: dict[Ending, EndingDetails] = {
    Ending.HEROIC_SACRIFICE: EndingDetails(
        icon="🏆",
        title="🏆 HEROIC SACRIFICE",
        summary=(
            "Your ultimate sacrifice saved the entire Rebellion! "
            "You will be remembered as the greatest hero of the war!"
        ),
        victorious=True,
    ),
    Ending.DEFEAT: EndingDetails(
        icon="💀",
        title="💀 DEFEAT",
        summary=(
            "The Death Star remains operational and the Rebellion has been crushed. "
            "The Empire's tyranny continues across the galaxy."
        ),
        victorious=False,
    ),
    Ending.LEGENDARY_FORCE_VICTORY: EndingDetails(
        icon="🌟",
        title="🌟 LEGENDARY FORCE VICTORY",
        summary=(
            "Your connection to the Force guided the impossible shot! "
            "You have become a true Jedi Knight! The galaxy will remember this day forever!"
        ),
        victorious=True,
    ),
    Ending.PERFECT_VICTORY: EndingDetails(
        icon="🎉",
        title="🎉 PERFECT VICTORY",
        summary=(
            "The Death Star explodes in a brilliant flash! Yavin 4 is saved and the "
            "Rebellion lives on! You are hailed as a hero of the galaxy!"
        ),
        victorious=True,
    ),
    Ending.COSTLY_VICTORY: EndingDetails(
        icon="⚔️",
        title="⚔️ COSTLY VICTORY",
        summary=(
            "The Death Star is destroyed but at great cost. Many brave pilots gave "
            "their lives for freedom. Their sacrifice will never be forgotten."
        ),
        victorious=True,
    ),
    Ending.VICTORY: EndingDetails(
        icon="🌟",
        title="🌟 VICTORY",
        summary="The Rebellion succeeds! The Death Star has been destroyed and freedom is restored to the galaxy!",
        victorious=True,
    ),
}


def is_flawless(ledger: ResourceLedger) -> bool:
    return (
        ledger.leia_rescued
        and ledger.death_star_plans
        and ledger.mentor_alive
        and not suffered_losses(ledger)
    )


def suffered_losses(ledger: ResourceLedger) -> bool:
    return (
        ledger.pilots_available < PILOT_LOSS_THRESHOLD
        or ledger.ships_available < SHIP_LOSS_THRESHOLD
    )


def classify(outcome: Outcome | None, ledger: ResourceLedger) -> Ending:
    """Return the ending for a finished campaign.

    *outcome* is ``None`` when the last phase completed through a branch that
    carried no tag; it is then judged like an ordinary strike.
    """
    if outcome is Outcome.HEROIC_DEATH:
        ending = Ending.HEROIC_SACRIFICE
    elif outcome is Outcome.DEATH:
        ending = Ending.DEFEAT
    elif outcome is Outcome.FORCE_STRIKE and ledger.force_points >= LEGENDARY_FORCE_THRESHOLD:
        ending = Ending.LEGENDARY_FORCE_VICTORY
    elif is_flawless(ledger):
        ending = Ending.PERFECT_VICTORY
    elif suffered_losses(ledger):
        ending = Ending.COSTLY_VICTORY
    else:
        ending = Ending.VICTORY

    logger.debug("Classified outcome %s as %s", outcome, ending)
    return ending
