from __future__ import annotations

import pytest

from rebel_command.errors import LedgerInvariantError
from rebel_command.models.ledger import Effects
from rebel_command.services import game_service
from rebel_command.services.catalog import Branch, OptionTemplate, PhaseCatalog, PhaseDefinition
from rebel_command.services.resolver import ChoiceResolver
from rebel_command.services.session_store import SessionStore

GAME_STATE_FIELDS = {
    "game_id",
    "commander_name",
    "reputation",
    "force_points",
    "credits",
    "ships_available",
    "pilots_available",
    "current_phase",
    "leia_rescued",
    "death_star_plans",
    "obi_wan_alive",
    "game_over",
    "preparations_made",
    "current_options",
    "phase_description",
}


def _create(client, name: str = "Luke") -> dict:
    response = client.post("/api/game/create", json={"commander_name": name})
    assert response.status_code == 200
    return response.json()


def test_health_and_liveness(client) -> None:
    assert client.get("/api/health").json() == {"status": "ok"}
    body = client.get("/api/test").json()
    assert body["success"] is True
    assert "POST /api/game/create" in body["data"]
    assert "error" not in body


def test_create_returns_wire_shape(client) -> None:
    body = _create(client)

    assert body["success"] is True
    assert "error" not in body
    data = body["data"]
    assert set(data) == GAME_STATE_FIELDS
    assert "last_action_result" not in data

    disguise, han, assault, intel = data["current_options"]
    assert set(intel) == {"id", "text", "description", "icon", "available"}
    assert han["cost"] == 50 and "requirement" not in han
    assert assault["requirement"] == "70+ reputation required"
    assert assault["available"] is False
    assert disguise["available"] is True


def test_choice_round_trip(client) -> None:
    game_id = _create(client)["data"]["game_id"]

    body = client.post(f"/api/game/{game_id}/choice", json={"choice": 2}).json()

    assert body["success"] is True
    assert body["data"]["current_phase"] == 2
    assert body["data"]["credits"] == 50
    assert body["data"]["last_action_result"].startswith("✅ Han Solo")
    assert client.get(f"/api/game/{game_id}").json() == body


@pytest.mark.parametrize("name", ["", "x" * 31])
def test_invalid_name_is_reported_in_envelope(client, name: str) -> None:
    body = _create(client, name)

    assert body["success"] is False
    assert "data" not in body
    assert "Commander name" in body["error"]


def test_unknown_game(client) -> None:
    body = client.get("/api/game/missing").json()
    assert body == {"success": False, "error": "Game not found"}

    body = client.post("/api/game/missing/choice", json={"choice": 1}).json()
    assert body == {"success": False, "error": "Game not found"}


def test_rejected_choices(client) -> None:
    game_id = _create(client)["data"]["game_id"]

    body = client.post(f"/api/game/{game_id}/choice", json={"choice": 3}).json()
    assert body["success"] is False
    assert "not available" in body["error"]

    body = client.post(f"/api/game/{game_id}/choice", json={"choice": 42}).json()
    assert body["success"] is False
    assert body["error"] == "Invalid choice 42 for Phase 1"

    assert client.get(f"/api/game/{game_id}").json()["data"]["credits"] == 100


def test_game_over_is_reported(client) -> None:
    game_id = _create(client)["data"]["game_id"]
    for choice in (1, 1, 1, 1, 4):
        body = client.post(f"/api/game/{game_id}/choice", json={"choice": choice}).json()

    assert body["data"]["game_over"] is True
    assert body["data"]["current_options"] == []
    assert "HEROIC SACRIFICE" in body["data"]["last_action_result"]

    body = client.post(f"/api/game/{game_id}/choice", json={"choice": 1}).json()
    assert body == {"success": False, "error": "Game is already over"}


def test_service_propagates_invariant_defects() -> None:
    catalog = PhaseCatalog(
        [
            PhaseDefinition(
                number=1,
                title="Broken",
                description="A badly authored phase",
                options=(
                    OptionTemplate(
                        id=1,
                        text="Overspend",
                        description="Loses pilots that do not exist",
                        icon="💥",
                        branches=(Branch("Lost", Effects(pilots=-100)),),
                    ),
                ),
            )
        ]
    )
    store = SessionStore(ChoiceResolver(catalog))
    game_id = game_service.create_game("Luke", store).data.game_id

    with pytest.raises(LedgerInvariantError):
        game_service.make_choice(game_id, 1, store)

    assert game_service.get_game(game_id, store).data.pilots_available == 8
