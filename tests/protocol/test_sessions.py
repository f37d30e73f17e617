from __future__ import annotations

from fastapi.testclient import TestClient

from duoqueen.config import Config, GameConfig
from duoqueen.protocol.http.app import create_app


START_9X8 = "rnbqkqbnr/ppppppppp/9/9/9/9/PPPPPPPPP/RNBQKQBNR w KQkq - 0 1"


def _client(config: Config | None = None) -> TestClient:
    return TestClient(create_app(config or Config()))


def test_create_game_and_get_state() -> None:
    client = _client()
    r = client.post("/api/games")
    assert r.status_code == 200
    body = r.json()
    game_id = body["game_id"]
    assert isinstance(game_id, str) and game_id
    assert body["fen"] == START_9X8
    assert body["board_size"] == "9x8"

    r2 = client.get(f"/api/games/{game_id}/state")
    assert r2.status_code == 200
    state = r2.json()
    assert state["game_id"] == game_id
    assert state["side_to_move"] == "white"
    assert len(state["legal_moves"]) == 22
    assert state["in_check"] is False
    assert state["game_over"] is False
    assert state["move_history"] == []


def test_create_tall_board() -> None:
    client = _client()
    r = client.post("/api/games", json={"board_size": "9x9"})
    assert r.status_code == 200
    assert r.json()["board_size"] == "9x9"
    assert r.json()["fen"].count("/9/") >= 2


def test_default_board_size_comes_from_config() -> None:
    client = _client(Config(game=GameConfig(board_size="9x9")))
    r = client.post("/api/games")
    assert r.json()["board_size"] == "9x9"


def test_get_state_unknown_id_404() -> None:
    client = _client()
    r = client.get("/api/games/does-not-exist/state")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "not_found"


def test_set_position_validation_and_success() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r_bad = client.post(f"/api/games/{game_id}/position", json={"fen": ""})
    assert r_bad.status_code == 400
    assert r_bad.json()["error"]["code"] == "bad_request"

    fen = "k8/9/1K7/9/9/9/9/8R w - - 0 1"
    r_ok = client.post(f"/api/games/{game_id}/position", json={"fen": fen})
    assert r_ok.status_code == 200
    assert r_ok.json()["fen"] == fen


def test_delete_game() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    assert client.delete(f"/api/games/{game_id}").json() == {"deleted": True}
    assert client.get(f"/api/games/{game_id}/state").status_code == 404
    assert client.delete(f"/api/games/{game_id}").status_code == 404


def test_export_and_import_roundtrip() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})
    client.post(f"/api/games/{game_id}/move", json={"move": "e7e5"})
    exported = client.get(f"/api/games/{game_id}/export").json()
    assert [m["notation"] for m in exported["moves"]] == ["e2-e4", "e7-e5"]

    r = client.post("/api/games/import", json=exported)
    assert r.status_code == 200
    new_id = r.json()["game_id"]
    assert new_id != game_id
    state = client.get(f"/api/games/{new_id}/state").json()
    assert state["move_history"] == ["e2-e4", "e7-e5"]
    assert state["fen"] == client.get(f"/api/games/{game_id}/state").json()["fen"]


def test_import_rejects_malformed_payload() -> None:
    client = _client()
    r = client.post("/api/games/import", json={"board_size": "9x8"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"


def test_set_position_unknown_game_404() -> None:
    client = _client()
    r = client.post("/api/games/missing/position", json={"fen": START_9X8})
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "not_found"
