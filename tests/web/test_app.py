"""Tests for the FastAPI web application."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from shogi_engine.game.board import Board
from shogi_engine.game.match import ShogiMatch
from shogi_engine.game.types import Color
from shogi_engine.web.app import ENGINE_PLAYER_ID, _matches, app

ENGINE_STUCK_POSITION = "k8/8R/1R7/9/9/9/9/9/4K4"


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def _new_match(client: TestClient, **body: Any) -> str:
    res = client.post("/api/matches", json=body)
    assert res.status_code == 200
    return res.json()["match_id"]


def _started_match(client: TestClient) -> str:
    match_id = _new_match(client)
    for player in ("alice", "bob"):
        client.post(f"/api/matches/{match_id}/join", json={"player_id": player})
    for player in ("alice", "bob"):
        client.post(f"/api/matches/{match_id}/start", json={"player_id": player})
    return match_id


def _pawn_push() -> dict[str, Any]:
    return {"type": "board", "from_sq": [6, 4], "to_sq": [5, 4]}


class TestNewMatch:
    def test_create_match(self, client: TestClient) -> None:
        res = client.post("/api/matches", json={})
        assert res.status_code == 200
        data = res.json()
        assert "match_id" in data
        assert data["state"]["status"] == "WAITING_FOR_PLAYERS"
        assert data["state"]["sfen"] == "lnsgkgsnl/1r5b1/ppppppppp/9/9/9/PPPPPPPPP/1B5R1/LNSGKGSNL"

    def test_engine_takes_white_seat(self, client: TestClient) -> None:
        res = client.post("/api/matches", json={"vs_engine": True})
        state = res.json()["state"]
        assert state["white"] == ENGINE_PLAYER_ID
        assert state["black"] is None


class TestLifecycle:
    def test_join_and_start(self, client: TestClient) -> None:
        match_id = _new_match(client)
        res = client.post(f"/api/matches/{match_id}/join", json={"player_id": "alice"})
        assert res.json()["color"] == "BLACK"
        res = client.post(f"/api/matches/{match_id}/join", json={"player_id": "bob"})
        assert res.json()["color"] == "WHITE"
        assert res.json()["state"]["status"] == "WAITING_TO_START"

        client.post(f"/api/matches/{match_id}/start", json={"player_id": "alice"})
        res = client.post(f"/api/matches/{match_id}/start", json={"player_id": "bob"})
        assert res.status_code == 200
        assert res.json()["status"] == "IN_PROGRESS"

    def test_game_full(self, client: TestClient) -> None:
        match_id = _started_match(client)
        res = client.post(f"/api/matches/{match_id}/join", json={"player_id": "carol"})
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "GAME_FULL"

    def test_leave_forfeits_and_records_history(self, client: TestClient) -> None:
        match_id = _started_match(client)
        res = client.post(f"/api/matches/{match_id}/leave", json={"player_id": "alice"})
        assert res.status_code == 200
        assert res.json()["status"] == "OVER"
        assert res.json()["winner"] == "bob"

        history = client.get("/api/history").json()
        entry = next(h for h in history if h["match_id"] == match_id)
        assert entry["winner"] == "bob"
        assert entry["scores"] == {"alice": 0, "bob": 1}


class TestMakeMove:
    def test_valid_move(self, client: TestClient) -> None:
        match_id = _started_match(client)
        res = client.post(
            f"/api/matches/{match_id}/move",
            json={"player_id": "alice", "move": _pawn_push()},
        )
        assert res.status_code == 200
        data = res.json()
        assert data["state"]["move_count"] == 1
        assert data["state"]["turn"] == "WHITE"
        assert data["player_move"]["to_sq"] == [5, 4]
        assert data["ai_move"] is None

    def test_not_your_turn(self, client: TestClient) -> None:
        match_id = _started_match(client)
        res = client.post(
            f"/api/matches/{match_id}/move",
            json={"player_id": "bob", "move": {"from_sq": [2, 4], "to_sq": [3, 4]}},
        )
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "NOT_YOUR_TURN"

    def test_not_in_progress(self, client: TestClient) -> None:
        match_id = _new_match(client)
        client.post(f"/api/matches/{match_id}/join", json={"player_id": "alice"})
        res = client.post(
            f"/api/matches/{match_id}/move",
            json={"player_id": "alice", "move": _pawn_push()},
        )
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "NOT_IN_PROGRESS"

    def test_invalid_position(self, client: TestClient) -> None:
        match_id = _started_match(client)
        res = client.post(
            f"/api/matches/{match_id}/move",
            json={"player_id": "alice", "move": {"from_sq": [7, 7], "to_sq": [6, 7]}},
        )
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "INVALID_POSITION"

    def test_unknown_drop_kind(self, client: TestClient) -> None:
        match_id = _started_match(client)
        res = client.post(
            f"/api/matches/{match_id}/move",
            json={"player_id": "alice", "move": {"type": "drop", "kind": "QUEEN", "to_sq": [4, 4]}},
        )
        assert res.status_code == 400

    def test_match_not_found(self, client: TestClient) -> None:
        res = client.post(
            "/api/matches/nonexistent/move",
            json={"player_id": "alice", "move": _pawn_push()},
        )
        assert res.status_code == 404


class TestEngine:
    def test_engine_replies(self, client: TestClient) -> None:
        match_id = _new_match(client, vs_engine=True, engine_depth=1)
        client.post(f"/api/matches/{match_id}/join", json={"player_id": "alice"})
        res = client.post(f"/api/matches/{match_id}/start", json={"player_id": "alice"})
        assert res.json()["status"] == "IN_PROGRESS"

        res = client.post(
            f"/api/matches/{match_id}/move",
            json={"player_id": "alice", "move": _pawn_push()},
        )
        assert res.status_code == 200
        data = res.json()
        assert data["ai_move"] is not None
        assert data["state"]["move_count"] == 2
        assert data["state"]["turn"] == "BLACK"

    def test_engine_move_endpoint(self, client: TestClient) -> None:
        match_id = _started_match(client)
        res = client.post(f"/api/matches/{match_id}/engine-move", json={"depth": 1})
        assert res.status_code == 200
        assert res.json()["state"]["move_count"] == 1
        assert res.json()["move"]["type"] == "board"

    def test_engine_without_moves_keeps_human_move(self, client: TestClient) -> None:
        """AI が応答できなくても、確定したプレイヤーの手は成功として返す。"""
        match_id = _new_match(client, vs_engine=True, engine_depth=1)
        # 後手玉(0,0)の逃げ道は飛車2枚に塞がれ、盤上の駒で指せる手がない（王手ではない）
        board = Board.from_notation(ENGINE_STUCK_POSITION, "p")
        match = ShogiMatch(board=board, match_id=match_id)
        match.join(ENGINE_PLAYER_ID, color=Color.WHITE)
        _matches[match_id]["match"] = match
        client.post(f"/api/matches/{match_id}/join", json={"player_id": "alice"})
        client.post(f"/api/matches/{match_id}/start", json={"player_id": "alice"})

        res = client.post(
            f"/api/matches/{match_id}/move",
            json={"player_id": "alice", "move": {"from_sq": [8, 4], "to_sq": [7, 4]}},
        )
        assert res.status_code == 200
        data = res.json()
        assert data["state"]["move_count"] == 1
        assert data["state"]["status"] == "IN_PROGRESS"
        assert data["player_move"]["to_sq"] == [7, 4]
        assert data["ai_move"] is None
        assert data["ai_error"]["code"] == "NO_LEGAL_MOVES"

        res = client.post(f"/api/matches/{match_id}/engine-move", json={})
        assert res.status_code == 400
        assert res.json()["detail"] == {
            "code": "NO_LEGAL_MOVES",
            "message": "No legal moves available",
        }
        assert client.get(f"/api/matches/{match_id}").json()["move_count"] == 1

    def test_engine_reply_has_no_error(self, client: TestClient) -> None:
        match_id = _new_match(client, vs_engine=True, engine_depth=1)
        client.post(f"/api/matches/{match_id}/join", json={"player_id": "alice"})
        client.post(f"/api/matches/{match_id}/start", json={"player_id": "alice"})
        res = client.post(
            f"/api/matches/{match_id}/move",
            json={"player_id": "alice", "move": _pawn_push()},
        )
        assert res.json()["ai_error"] is None

    def test_engine_move_before_start(self, client: TestClient) -> None:
        match_id = _new_match(client)
        res = client.post(f"/api/matches/{match_id}/engine-move", json={})
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "NOT_IN_PROGRESS"


class TestGetState:
    def test_get_existing_match(self, client: TestClient) -> None:
        match_id = _new_match(client)
        res = client.get(f"/api/matches/{match_id}")
        assert res.status_code == 200
        assert res.json()["match_id"] == match_id

    def test_get_nonexistent_match(self, client: TestClient) -> None:
        res = client.get("/api/matches/nonexistent")
        assert res.status_code == 404

    def test_valid_moves(self, client: TestClient) -> None:
        match_id = _started_match(client)
        res = client.get(f"/api/matches/{match_id}/valid-moves", params={"row": 6, "col": 4})
        assert res.status_code == 200
        assert res.json() == [
            {"type": "board", "from_sq": [6, 4], "to_sq": [5, 4], "promote": False}
        ]
