"""Phase catalog — the static definition of every phase and its options.

The catalog is immutable and shared by all sessions.  Each option template
holds an ordered tuple of :class:`Branch` objects; when the option is chosen
the first branch whose guard holds against the (post-cost) ledger is taken.
Availability is decided solely by the option's :class:`Requirement`; credit
costs are checked at resolve time instead.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from rebel_command.models.game import GameOption
from rebel_command.models.ledger import NO_EFFECTS, Effects, ResourceLedger
from rebel_command.services.endings import LEGENDARY_FORCE_THRESHOLD, Outcome

Predicate = Callable[[ResourceLedger], bool]
Narrative = str | Callable[[ResourceLedger], str]

# ── Tuning ───────────────────────────────────────────────────────────────
DISGUISE_REPUTATION = 40
HAN_SOLO_COST = 50
DIRECT_ASSAULT_REPUTATION = 70

MEDITATION_FORCE_COST = 5
TECHNICIANS_COST = 30
RUSH_REPUTATION = 60

PREPARATIONS_REQUIRED = 2
UPGRADE_COST = 40
VOLUNTEER_REPUTATION = 50

MASSIVE_ASSAULT_SHIPS = 6
MASSIVE_ASSAULT_PILOTS = 10
MASSIVE_ASSAULT_MIN_CHANCE = 50
SACRIFICE_MAX_SHIPS = 4

MISSION_COMPLETE_DESCRIPTION = "🏁 The campaign is over. Your choices have decided the fate of the Rebellion."


@dataclass(frozen=True)
class Requirement:
    """Predicate over the ledger with a label shown to the player.

    An *advisory* requirement is only a recommendation: the option stays
    available, but its branches usually depend on the same condition.
    """

    label: str
    check: Predicate
    advisory: bool = False

    def is_met(self, ledger: ResourceLedger) -> bool:
        return self.check(ledger)

    def allows(self, ledger: ResourceLedger) -> bool:
        return self.advisory or self.is_met(ledger)


@dataclass(frozen=True)
class Branch:
    narrative: Narrative
    effects: Effects = NO_EFFECTS
    when: Predicate | None = None
    completes_phase: bool = False
    outcome: Outcome | None = None

    def matches(self, ledger: ResourceLedger) -> bool:
        return self.when is None or self.when(ledger)

    def render(self, ledger: ResourceLedger) -> str:
        if callable(self.narrative):
            return self.narrative(ledger)
        return self.narrative

    @property
    def fatal(self) -> bool:
        return self.outcome is not None and self.outcome.fatal


@dataclass(frozen=True)
class OptionTemplate:
    id: int
    text: str
    description: str
    icon: str
    branches: tuple[Branch, ...]
    cost: int | None = None
    requirement: Requirement | None = None

    def is_available(self, ledger: ResourceLedger) -> bool:
        return self.requirement is None or self.requirement.allows(ledger)

    def offer(self, ledger: ResourceLedger) -> GameOption:
        return GameOption(
            id=self.id,
            text=self.text,
            description=self.description,
            icon=self.icon,
            cost=self.cost,
            requirement=self.requirement.label if self.requirement else None,
            available=self.is_available(ledger),
        )

    def select_branch(self, ledger: ResourceLedger) -> Branch:
        for branch in self.branches:
            if branch.matches(ledger):
                return branch
        raise LookupError(f"No outcome branch of option {self.id} ({self.text!r}) matches the ledger")


@dataclass(frozen=True)
class PhaseDefinition:
    number: int
    title: str
    description: Narrative
    options: tuple[OptionTemplate, ...]
    completion: Predicate | None = None

    def is_complete(self, ledger: ResourceLedger, branch: Branch) -> bool:
        if branch.completes_phase:
            return True
        return self.completion is not None and self.completion(ledger)


class PhaseCatalog:
    """Read-only lookup of phase definitions, keyed by phase number."""

    def __init__(self, phases: Iterable[PhaseDefinition]) -> None:
        self._phases = {phase.number: phase for phase in phases}
        self.final_phase = max(self._phases)

    @property
    def closing_description(self) -> str:
        """Shown once a campaign has ended, whichever phase it ended in."""
        return MISSION_COMPLETE_DESCRIPTION

    def phase(self, number: int) -> PhaseDefinition:
        return self._phases[number]

    def description_for(self, number: int, ledger: ResourceLedger | None = None) -> str:
        phase = self._phases.get(number)
        if phase is None:
            return self.closing_description
        if callable(phase.description):
            return phase.description(ledger if ledger is not None else ResourceLedger())
        return phase.description

    def options_for(self, number: int, ledger: ResourceLedger) -> list[GameOption]:
        phase = self._phases.get(number)
        if phase is None:
            return []
        return [template.offer(ledger) for template in phase.options]

    def template(self, number: int, option_id: int) -> OptionTemplate | None:
        phase = self._phases.get(number)
        if phase is None:
            return None
        return next((t for t in phase.options if t.id == option_id), None)


def assault_success_chance(ledger: ResourceLedger) -> int:
    """Percent chance shown for the Death Star assault, capped at 95."""
    chance = 30
    if ledger.death_star_plans:
        chance += 30
    if ledger.ships_available >= 8:
        chance += 20
    if ledger.pilots_available >= 12:
        chance += 15
    if ledger.reputation >= 70:
        chance += 20
    return min(chance, 95)


# ── Phase 1: rescue Princess Leia ────────────────────────────────────────

_PHASE_1 = PhaseDefinition(
    number=1,
    title="Rescue Leia",
    description=(
        "🚀 PHASE 1: RESCUE PRINCESS LEIA\n\nThe Death Star has captured Princess Leia! "
        "R2-D2 and C-3PO have escaped with secret plans. You must decide how to rescue the princess..."
    ),
    completion=lambda ledger: ledger.leia_rescued,
    options=(
        OptionTemplate(
            id=1,
            text="Disguise as Stormtroopers",
            description="Risky but stealthy infiltration",
            icon="🎭",
            requirement=Requirement(
                f"{DISGUISE_REPUTATION}+ reputation recommended",
                lambda ledger: ledger.reputation >= DISGUISE_REPUTATION,
                advisory=True,
            ),
            branches=(
                Branch(
                    "✅ Mission success! Princess Leia rescued, but Obi-Wan sacrifices himself...",
                    Effects(reputation=20, force_points=10, rescue_leia=True, lose_mentor=True),
                    when=lambda ledger: ledger.reputation >= DISGUISE_REPUTATION,
                ),
                Branch(
                    "❌ Disguise failed! Low reputation made guards suspicious.",
                    Effects(reputation=-10),
                ),
            ),
        ),
        OptionTemplate(
            id=2,
            text="Hire Han Solo & Chewbacca",
            description="Expensive but reliable smugglers",
            icon="💰",
            cost=HAN_SOLO_COST,
            branches=(
                Branch(
                    "✅ Han Solo: 'I've got a bad feeling about this...' Mission successful!",
                    Effects(reputation=15, ships=1, rescue_leia=True),
                ),
            ),
        ),
        OptionTemplate(
            id=3,
            text="Direct Assault on Death Star",
            description="High-risk military operation",
            icon="⚔️",
            requirement=Requirement(
                f"{DIRECT_ASSAULT_REPUTATION}+ reputation required",
                lambda ledger: ledger.reputation >= DIRECT_ASSAULT_REPUTATION,
            ),
            branches=(
                Branch(
                    "✅ Massive battle but Leia is rescued! Heavy casualties sustained.",
                    Effects(reputation=30, ships=-2, pilots=-3, rescue_leia=True),
                ),
            ),
        ),
        OptionTemplate(
            id=4,
            text="Check Mission Intel",
            description="Review strategic information",
            icon="📊",
            branches=(
                Branch(
                    "📊 Intel gathered. Death Star defenses are extremely heavy. "
                    "Success depends on reputation and strategy."
                ),
            ),
        ),
    ),
)

# ── Phase 2: decode the Death Star plans ─────────────────────────────────

_PHASE_2 = PhaseDefinition(
    number=2,
    title="Decode Plans",
    description=(
        "🔍 PHASE 2: DECODE DEATH STAR PLANS\n\nR2-D2 has the complete Death Star technical "
        "readouts, but the data is encrypted with Imperial codes..."
    ),
    options=(
        OptionTemplate(
            id=1,
            text="Use C-3PO's Protocol Skills",
            description="Slow but safe decoding method",
            icon="🤖",
            branches=(
                Branch(
                    "✅ C-3PO successfully decodes the plans! Weakness discovered: thermal exhaust port!",
                    Effects(reputation=10, decode_plans=True),
                    completes_phase=True,
                ),
            ),
        ),
        OptionTemplate(
            id=2,
            text="Force Meditation",
            description="Use the Force to understand the plans",
            icon="🧠",
            requirement=Requirement(
                f"{MEDITATION_FORCE_COST} Force Points required",
                lambda ledger: ledger.force_points >= MEDITATION_FORCE_COST,
            ),
            branches=(
                Branch(
                    "✅ Obi-Wan guides your meditation! Perfect understanding achieved!",
                    Effects(reputation=25, force_points=10 - MEDITATION_FORCE_COST, decode_plans=True),
                    when=lambda ledger: ledger.mentor_alive,
                    completes_phase=True,
                ),
                Branch(
                    "✅ Obi-Wan's spirit helps from beyond! Plans decoded!",
                    Effects(reputation=15, force_points=-MEDITATION_FORCE_COST, decode_plans=True),
                    completes_phase=True,
                ),
            ),
        ),
        OptionTemplate(
            id=3,
            text="Hire Rebel Technicians",
            description="Professional analysis team",
            icon="💻",
            cost=TECHNICIANS_COST,
            branches=(
                Branch(
                    "✅ Expert analysis complete! Weakness identified and ship upgraded!",
                    Effects(ships=1, decode_plans=True),
                    completes_phase=True,
                ),
            ),
        ),
        OptionTemplate(
            id=4,
            text="Rush the Analysis",
            description="Quick but risky decode attempt",
            icon="⏰",
            requirement=Requirement(
                f"{RUSH_REPUTATION}+ reputation recommended",
                lambda ledger: ledger.reputation >= RUSH_REPUTATION,
                advisory=True,
            ),
            branches=(
                Branch(
                    "✅ Quick but accurate decode! Your reputation attracted the best analysts!",
                    Effects(decode_plans=True),
                    when=lambda ledger: ledger.reputation >= RUSH_REPUTATION,
                    completes_phase=True,
                ),
                Branch(
                    "❌ Rushed analysis produced incomplete data! You'll attack without full intel...",
                    Effects(reputation=-15),
                    completes_phase=True,
                ),
            ),
        ),
    ),
)

# ── Phase 3: prepare for battle ──────────────────────────────────────────


def _preparation_note(message: str) -> Callable[[ResourceLedger], str]:
    def render(ledger: ResourceLedger) -> str:
        return f"{message} (Preparation {ledger.preparations_made}/{PREPARATIONS_REQUIRED})"

    return render


def _readiness_report(ledger: ResourceLedger) -> str:
    plans = "Complete" if ledger.death_star_plans else "Incomplete"
    return (
        f"📋 Battle Readiness: {ledger.ships_available} ships, {ledger.pilots_available} pilots, "
        f"Plans: {plans}, Reputation: {ledger.reputation}/100, Force: {ledger.force_points} points, "
        f"Preparations: {ledger.preparations_made}/{PREPARATIONS_REQUIRED}"
    )


def _phase_3_description(ledger: ResourceLedger) -> str:
    return (
        "⚔️ PHASE 3: PREPARE FOR BATTLE\n\nThe Death Star is approaching Yavin 4! You have limited "
        f"time to prepare the final assault. Choose {PREPARATIONS_REQUIRED} preparations:\n\n"
        f"📊 Preparations Complete: {ledger.preparations_made}/{PREPARATIONS_REQUIRED}"
    )


_PHASE_3 = PhaseDefinition(
    number=3,
    title="Prepare Battle",
    description=_phase_3_description,
    completion=lambda ledger: ledger.preparations_made >= PREPARATIONS_REQUIRED,
    options=(
        OptionTemplate(
            id=1,
            text="Train Pilots",
            description="Intensive combat training session",
            icon="🎓",
            branches=(
                Branch(
                    _preparation_note("✅ Pilot training complete! +2 experienced pilots gained."),
                    Effects(pilots=2, preparations=1),
                ),
            ),
        ),
        OptionTemplate(
            id=2,
            text="Upgrade Ships",
            description="Enhance weapons and shields",
            icon="🔧",
            cost=UPGRADE_COST,
            branches=(
                Branch(
                    _preparation_note("✅ Ship upgrades complete! Fleet effectiveness increased."),
                    Effects(ships=1, preparations=1),
                ),
            ),
        ),
        OptionTemplate(
            id=3,
            text="Recruit Volunteers",
            description="Find brave pilots to join",
            icon="👥",
            branches=(
                Branch(
                    _preparation_note("✅ Volunteers recruited! Your reputation drew a full flight."),
                    Effects(pilots=3, preparations=1),
                    when=lambda ledger: ledger.reputation >= VOLUNTEER_REPUTATION,
                ),
                Branch(
                    _preparation_note("✅ Volunteers recruited!"),
                    Effects(pilots=1, preparations=1),
                ),
            ),
        ),
        OptionTemplate(
            id=4,
            text="Force Training",
            description="Meditation and spiritual preparation",
            icon="🧘",
            branches=(
                Branch(
                    _preparation_note("✅ Force training complete! Obi-Wan sharpens your focus."),
                    Effects(force_points=25, preparations=1),
                    when=lambda ledger: ledger.mentor_alive,
                ),
                Branch(
                    _preparation_note("✅ Force training complete!"),
                    Effects(force_points=15, preparations=1),
                ),
            ),
        ),
        OptionTemplate(
            id=5,
            text="Review Strategy",
            description="Check current battle readiness",
            icon="📋",
            branches=(Branch(_readiness_report),),
        ),
    ),
)

# ── Phase 4: the Death Star assault ──────────────────────────────────────


def _phase_4_description(ledger: ResourceLedger) -> str:
    return (
        "💥 PHASE 4: DEATH STAR ASSAULT\n\nRed Squadron launches for the final battle! "
        "The fate of the rebellion rests in your hands...\n\n"
        f"📊 Mission Success Probability: {assault_success_chance(ledger)}%"
    )


_PHASE_4 = PhaseDefinition(
    number=4,
    title="Death Star Assault",
    description=_phase_4_description,
    options=(
        OptionTemplate(
            id=1,
            text="Precision Targeting Run",
            description="Follow Death Star plans exactly",
            icon="🎯",
            requirement=Requirement(
                "Complete Death Star plans required",
                lambda ledger: ledger.death_star_plans,
            ),
            branches=(
                Branch(
                    "Direct hit on the exhaust port! The Death Star explodes!",
                    Effects(reputation=50),
                    completes_phase=True,
                    outcome=Outcome.STRIKE,
                ),
            ),
        ),
        OptionTemplate(
            id=2,
            text="Trust in the Force",
            description="Use the Force for the impossible shot",
            icon="✨",
            requirement=Requirement(
                f"{LEGENDARY_FORCE_THRESHOLD} Force Points required",
                lambda ledger: ledger.force_points >= LEGENDARY_FORCE_THRESHOLD,
            ),
            branches=(
                Branch(
                    "The Force guides your shot perfectly! You are now a true Jedi!",
                    Effects(reputation=75),
                    completes_phase=True,
                    outcome=Outcome.FORCE_STRIKE,
                ),
            ),
        ),
        OptionTemplate(
            id=3,
            text="Massive Coordinated Assault",
            description="Launch all available fighters",
            icon="🚀",
            requirement=Requirement(
                f"{MASSIVE_ASSAULT_SHIPS}+ ships and {MASSIVE_ASSAULT_PILOTS}+ pilots required",
                lambda ledger: (
                    ledger.ships_available >= MASSIVE_ASSAULT_SHIPS
                    and ledger.pilots_available >= MASSIVE_ASSAULT_PILOTS
                ),
            ),
            branches=(
                Branch(
                    "Overwhelming firepower succeeds, but many brave pilots were lost...",
                    Effects(ships=-3, pilots=-5),
                    when=lambda ledger: assault_success_chance(ledger) >= MASSIVE_ASSAULT_MIN_CHANCE,
                    completes_phase=True,
                    outcome=Outcome.STRIKE,
                ),
                Branch(
                    "Not enough firepower to penetrate Death Star defenses!",
                    outcome=Outcome.DEATH,
                ),
            ),
        ),
        OptionTemplate(
            id=4,
            text="Desperate Last Chance",
            description="Kamikaze run when the fleet is too thin for anything else",
            icon="🎲",
            requirement=Requirement(
                f"{SACRIFICE_MAX_SHIPS} or fewer ships recommended",
                lambda ledger: ledger.ships_available <= SACRIFICE_MAX_SHIPS,
                advisory=True,
            ),
            branches=(
                Branch(
                    "Your kamikaze run destroys the Death Star! You die a hero!",
                    when=lambda ledger: ledger.ships_available <= SACRIFICE_MAX_SHIPS,
                    outcome=Outcome.HEROIC_DEATH,
                ),
                Branch(
                    "Desperate attack fails! Too many ships drew the Death Star's fire.",
                    outcome=Outcome.DEATH,
                ),
            ),
        ),
    ),
)


CAMPAIGN = PhaseCatalog([_PHASE_1, _PHASE_2, _PHASE_3, _PHASE_4])
