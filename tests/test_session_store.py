from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import threading
import time

import pytest

from rebel_command.errors import (
    GameAlreadyOverError,
    GameNotFoundError,
    InsufficientCreditsError,
    InvalidChoiceError,
    InvalidInputError,
)
from rebel_command.models.ledger import STARTING_CREDITS, Effects
from rebel_command.models.session import TicketLock
from rebel_command.services.catalog import Branch, OptionTemplate, PhaseCatalog, PhaseDefinition
from rebel_command.services.endings import Ending
from rebel_command.services.resolver import ChoiceResolver
from rebel_command.services.session_store import SessionStore

# Option ids, one per step, from a fresh commander to each ending
PERFECT_ROUTE = (2, 1, 1, 1, 1)
VICTORY_ROUTE = (1, 1, 1, 1, 1)
LEGENDARY_ROUTE = (1, 1, 1, 1, 2)
HEROIC_ROUTE = (1, 1, 1, 1, 4)
COSTLY_ROUTE = (2, 3, 1, 3, 3)
DEFEAT_ROUTE = (2, 4, 2, 1, 3)
LAST_CHANCE_DEFEAT_ROUTE = (2, 4, 1, 1, 4)


class TestCreate:
    def test_new_game_starts_in_phase_one(self, store: SessionStore) -> None:
        state = store.get(store.create("Luke"))

        assert state.commander_name == "Luke"
        assert state.current_phase == 1
        assert state.credits == STARTING_CREDITS
        assert not state.game_over
        assert state.last_action_result is None
        assert len(state.current_options) == 4

    def test_session_ids_are_unique(self, store: SessionStore) -> None:
        ids = {store.create("Luke") for _ in range(20)}
        assert len(ids) == 20
        assert len(store) == 20

    @pytest.mark.parametrize("name", ["", "   ", "x" * 31])
    def test_rejects_bad_names(self, store: SessionStore, name: str) -> None:
        with pytest.raises(InvalidInputError):
            store.create(name)
        assert len(store) == 0

    def test_accepts_thirty_characters(self, store: SessionStore) -> None:
        state = store.get(store.create("x" * 30))
        assert state.commander_name == "x" * 30

    def test_unknown_session(self, store: SessionStore) -> None:
        with pytest.raises(GameNotFoundError):
            store.get("nope")
        with pytest.raises(GameNotFoundError):
            store.apply("nope", 1)


class TestRejections:
    def test_unmet_requirement_leaves_state_unchanged(self, store: SessionStore) -> None:
        session_id = store.create("Luke")
        before = store.get(session_id)

        with pytest.raises(InvalidChoiceError):
            store.apply(session_id, 3)

        assert store.get(session_id) == before

    def test_insufficient_credits_leaves_state_unchanged(self, store: SessionStore, play) -> None:
        session_id = store.create("Luke")
        before = play(session_id, [2, 3])
        assert before.credits == 20
        assert before.current_phase == 3

        with pytest.raises(InsufficientCreditsError):
            store.apply(session_id, 2)

        assert store.get(session_id) == before

    def test_finished_game_is_frozen(self, store: SessionStore, play) -> None:
        session_id = store.create("Luke")
        final = play(session_id, PERFECT_ROUTE)

        for option_id in (1, 2, 3, 4, 99):
            with pytest.raises(GameAlreadyOverError):
                store.apply(session_id, option_id)

        assert store.get(session_id).model_dump() == final.model_dump()
        assert store.get(session_id).model_dump() == store.get(session_id).model_dump()


class TestCampaigns:
    def test_perfect_victory(self, store: SessionStore, play) -> None:
        session_id = store.create("Luke")

        state = play(session_id, PERFECT_ROUTE)

        assert state.game_over
        assert state.current_phase == 5
        assert state.leia_rescued and state.death_star_plans and state.obi_wan_alive
        assert "PERFECT VICTORY" in state.last_action_result
        assert state.reputation == 100
        assert store.ending(session_id) is Ending.PERFECT_VICTORY

    def test_heroic_sacrifice(self, store: SessionStore, play) -> None:
        session_id = store.create("Luke")
        before_final = play(session_id, HEROIC_ROUTE[:-1])
        assert before_final.current_phase == 4
        assert before_final.ships_available <= 4

        state = store.apply(session_id, HEROIC_ROUTE[-1])

        assert state.game_over
        assert state.current_phase == 4
        assert "HEROIC SACRIFICE" in state.last_action_result
        assert state.current_options == []

    @pytest.mark.parametrize(
        ("route", "ending"),
        [
            (VICTORY_ROUTE, Ending.VICTORY),
            (LEGENDARY_ROUTE, Ending.LEGENDARY_FORCE_VICTORY),
            (COSTLY_ROUTE, Ending.COSTLY_VICTORY),
            (DEFEAT_ROUTE, Ending.DEFEAT),
            (LAST_CHANCE_DEFEAT_ROUTE, Ending.DEFEAT),
        ],
    )
    def test_other_endings(self, store: SessionStore, play, route: tuple[int, ...], ending: Ending) -> None:
        session_id = store.create("Luke")

        state = play(session_id, route)

        assert state.game_over
        assert store.ending(session_id) is ending
        assert state.last_action_result.startswith(f"{ending.details.icon} {ending.label}!")

    def test_phase_is_monotonic_and_options_track_game_over(self, store: SessionStore) -> None:
        session_id = store.create("Luke")
        phases = [store.get(session_id).current_phase]

        for option_id in COSTLY_ROUTE:
            state = store.apply(session_id, option_id)
            phases.append(state.current_phase)
            assert bool(state.current_options) is not state.game_over
            assert 0 <= state.reputation <= 100

        assert phases == sorted(phases)
        assert phases == [1, 2, 3, 3, 4, 5]


def _counter_catalog() -> PhaseCatalog:
    return PhaseCatalog(
        [
            PhaseDefinition(
                number=1,
                title="Drill",
                description="Endless drills",
                options=(
                    OptionTemplate(
                        id=1,
                        text="Drill",
                        description="One more drill",
                        icon="🎓",
                        branches=(Branch("Drilled", Effects(force_points=1)),),
                    ),
                ),
            )
        ]
    )


class TestConcurrency:
    def test_same_session_updates_are_serialized(self) -> None:
        store = SessionStore(ChoiceResolver(_counter_catalog()))
        session_id = store.create("Luke")
        start = store.get(session_id).force_points

        with ThreadPoolExecutor(max_workers=16) as pool:
            list(pool.map(lambda _: store.apply(session_id, 1), range(400)))

        assert store.get(session_id).force_points == start + 400

    def test_sessions_are_independent(self, store: SessionStore, play) -> None:
        first = store.create("Luke")
        second = store.create("Leia")
        untouched = store.get(second)

        play(first, PERFECT_ROUTE)

        assert store.get(second) == untouched

    def test_ticket_lock_excludes_and_preserves_order(self) -> None:
        lock = TicketLock()
        order: list[int] = []
        inside = 0
        overlaps = 0

        def worker(index: int) -> None:
            nonlocal inside, overlaps
            with lock:
                inside += 1
                overlaps += inside > 1
                order.append(index)
                time.sleep(0.001)
                inside -= 1

        with lock:
            threads = []
            for index in range(5):
                thread = threading.Thread(target=worker, args=(index,))
                thread.start()
                threads.append(thread)
                # let each thread take its ticket before starting the next
                while lock._next_ticket < index + 2:
                    time.sleep(0.001)
        for thread in threads:
            thread.join()

        assert overlaps == 0
        assert order == [0, 1, 2, 3, 4]

    def test_interrupted_waiter_does_not_block_later_callers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        lock = TicketLock()
        lock.__enter__()

        def interrupted(predicate, timeout=None):
            raise KeyboardInterrupt

        monkeypatch.setattr(lock._condition, "wait_for", interrupted)
        with pytest.raises(KeyboardInterrupt):
            with lock:
                pass
        monkeypatch.undo()

        lock.__exit__(None, None, None)
        acquired = threading.Event()

        def worker() -> None:
            with lock:
                acquired.set()

        thread = threading.Thread(target=worker, daemon=True)
        thread.start()
        thread.join(timeout=5)

        assert acquired.is_set()
