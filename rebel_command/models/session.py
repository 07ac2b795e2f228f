"""Live campaign session — one commander's playthrough."""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
from typing import TYPE_CHECKING

from rebel_command.models.game import GameOption, GameState
from rebel_command.models.ledger import ResourceLedger

if TYPE_CHECKING:
    from rebel_command.services.endings import Ending


class TicketLock:
    """Mutex that hands ownership to waiters strictly in arrival order.

    A waiter interrupted before its turn (e.g. by ``KeyboardInterrupt``)
    gives up its ticket, and the queue skips it.
    """

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._next_ticket = 0
        self._now_serving = 0
        self._abandoned: set[int] = set()

    def __enter__(self) -> TicketLock:
        with self._condition:
            ticket = self._next_ticket
            self._next_ticket += 1
            try:
                self._condition.wait_for(lambda: self._now_serving == ticket)
            except BaseException:
                if self._now_serving == ticket:
                    self._advance()
                else:
                    self._abandoned.add(ticket)
                raise
        return self

    def __exit__(self, *exc_info: object) -> None:
        with self._condition:
            self._advance()

    def _advance(self) -> None:
        # caller holds self._condition
        self._now_serving += 1
        while self._now_serving in self._abandoned:
            self._abandoned.remove(self._now_serving)
            self._now_serving += 1
        self._condition.notify_all()


@dataclass
class Session:
    """Mutable server-side state of a campaign.

    Only :class:`~rebel_command.services.resolver.ChoiceResolver` changes the
    fields after creation, and only while :attr:`lock` is held by the store.
    """

    session_id: str
    commander_name: str
    ledger: ResourceLedger = field(default_factory=ResourceLedger)
    phase: int = 1
    game_over: bool = False
    last_result: str | None = None
    ending: Ending | None = None
    options: list[GameOption] = field(default_factory=list)
    phase_description: str = ""
    lock: TicketLock = field(default_factory=TicketLock, repr=False, compare=False)

    def find_option(self, option_id: int) -> GameOption | None:
        return next((option for option in self.options if option.id == option_id), None)

    def snapshot(self) -> GameState:
        ledger = self.ledger
        return GameState(
            game_id=self.session_id,
            commander_name=self.commander_name,
            reputation=ledger.reputation,
            force_points=ledger.force_points,
            credits=ledger.credits,
            ships_available=ledger.ships_available,
            pilots_available=ledger.pilots_available,
            current_phase=self.phase,
            leia_rescued=ledger.leia_rescued,
            death_star_plans=ledger.death_star_plans,
            obi_wan_alive=ledger.mentor_alive,
            game_over=self.game_over,
            preparations_made=ledger.preparations_made,
            current_options=[option.model_copy() for option in self.options],
            phase_description=self.phase_description,
            last_action_result=self.last_result,
        )
