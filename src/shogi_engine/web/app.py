"""FastAPI session layer for playing shogi matches.

FastAPI を使った対局セッション層。プレイヤーの操作を対局インスタンスへ中継し、
結果（局面スナップショットまたは型付きエラー）をそのまま返す。

エンドポイント:
  POST /api/matches                        新規対局を作成（対局IDを返す）
  POST /api/matches/{id}/join              対局に参加
  POST /api/matches/{id}/start             準備完了
  POST /api/matches/{id}/move              手を指す（AI対局ならAIが応答する）
  POST /api/matches/{id}/leave             退出（対局中なら投了扱い）
  POST /api/matches/{id}/engine-move       手番側の手をAIに指させる
  GET  /api/matches/{id}                   現在の局面情報を取得
  GET  /api/matches/{id}/valid-moves       指定マスの駒の移動可能マス
  GET  /api/history                        終局した対局の結果一覧

ハンドラはすべて async で、途中で await しないため同じ対局への操作は
イベントループ上で1件ずつ実行される（対局ごとの直列化）。
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Any, Literal

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from shogi_engine.engine.negamax import SearchConfig, best_move
from shogi_engine.game.errors import MatchError, NoLegalMovesError, NotInProgressError
from shogi_engine.game.match import MatchResult, MatchStatus, ShogiMatch
from shogi_engine.game.moves import BoardMove, DropMove, Move, format_move
from shogi_engine.game.types import Color, Kind

logger = logging.getLogger(__name__)

# AI対局で AI が座るプレイヤーID
ENGINE_PLAYER_ID = "engine"

SEARCH_CONFIG = SearchConfig()

app = FastAPI(title="Shogi Engine")

# 対局情報のインメモリストレージ（サーバ再起動で消える簡易実装）
_matches: dict[str, dict[str, Any]] = {}

# 終局した対局の結果（永続化担当への通知の代わり）
_history: list[dict[str, Any]] = []


class NewMatchRequest(BaseModel):
    """新規対局リクエストのスキーマ。"""

    vs_engine: bool = False  # True なら AI が後手として参加する
    engine_depth: int | None = None  # AI の探索深さ（上限で丸める）


class PlayerRequest(BaseModel):
    """参加・準備完了・退出リクエストのスキーマ。"""

    player_id: str


class MovePayload(BaseModel):
    """指し手のスキーマ。

    type="board": from_sq, to_sq, promote を使う
    type="drop":  kind（"PAWN" など）, to_sq を使う
    """

    type: Literal["board", "drop"] = "board"
    from_sq: tuple[int, int] | None = None
    to_sq: tuple[int, int]
    promote: bool = False
    kind: str | None = None


class MoveRequest(BaseModel):
    """指し手リクエストのスキーマ。"""

    player_id: str
    move: MovePayload


class EngineMoveRequest(BaseModel):
    """AI着手リクエストのスキーマ。"""

    depth: int | None = None


def _to_move(payload: MovePayload) -> Move:
    """Convert the request payload to an engine move.

    形式が不正な場合は HTTP 400 を返す。
    """
    if payload.type == "drop":
        if payload.kind is None or payload.kind.upper() not in Kind.__members__:
            raise HTTPException(400, f"Unknown drop kind: {payload.kind}")
        return DropMove(Kind[payload.kind.upper()], payload.to_sq)
    if payload.from_sq is None:
        raise HTTPException(400, "Board move requires from_sq")
    return BoardMove(payload.from_sq, payload.to_sq, payload.promote)


def _move_to_dict(move: Move) -> dict[str, Any]:
    if isinstance(move, DropMove):
        return {"type": "drop", "kind": move.kind.name, "to_sq": list(move.to_sq)}
    return {
        "type": "board",
        "from_sq": list(move.from_sq),
        "to_sq": list(move.to_sq),
        "promote": move.promote,
    }


def _error_body(exc: MatchError) -> dict[str, str]:
    return {"code": exc.code, "message": str(exc)}


def _error(exc: MatchError) -> HTTPException:
    """対局エラーを HTTP 400 に変換する（code はそのままクライアントへ返す）。"""
    return HTTPException(400, _error_body(exc))


def _get_match(match_id: str) -> dict[str, Any]:
    entry = _matches.get(match_id)
    if entry is None:
        raise HTTPException(404, "Match not found")
    return entry


def _record_result(match_id: str) -> Callable[[MatchResult], None]:
    """終局時に結果を履歴へ記録するコールバックを作る。

    勝者に 1、それ以外の参加者に 0 を付ける。
    """

    def record(result: MatchResult) -> None:
        scores = {p: int(p == result.winner) for p in result.participants}
        _history.append({"match_id": match_id, "winner": result.winner, "scores": scores})
        logger.info("Recorded result for match %s: %s", match_id, scores)

    return record


def _play_engine(match: ShogiMatch, player_id: str, depth: int) -> Move:
    """AI に手番側の手を計算させ、その手を player_id として適用する。

    指せる手がなければ NoLegalMovesError（局面は変更しない）。
    """
    try:
        move = best_move(match.board, match.turn, depth)
    except ValueError as exc:
        raise NoLegalMovesError(str(exc)) from exc
    match.apply_move(player_id, move)
    logger.info("Match %s: engine played %s", match.match_id, format_move(move))
    return move


@app.post("/api/matches")
async def new_match(req: NewMatchRequest) -> dict[str, Any]:
    """新規対局を作成する。

    vs_engine=True の場合、AI が後手の席に座って準備完了になる。
    人間が join して start すると対局が始まる。
    """
    match_id = str(uuid.uuid4())[:8]  # 短いIDを生成
    match = ShogiMatch(on_over=_record_result(match_id), match_id=match_id)
    depth = SEARCH_CONFIG.clamp(req.engine_depth)

    if req.vs_engine:
        # 先手の席は人間のために空けておく
        match.join(ENGINE_PLAYER_ID, color=Color.WHITE)

    _matches[match_id] = {
        "match": match,
        "vs_engine": req.vs_engine,
        "engine_depth": depth,
    }
    logger.info("Created match %s (vs_engine=%s)", match_id, req.vs_engine)
    return {"match_id": match_id, "state": match.snapshot()}


@app.post("/api/matches/{match_id}/join")
async def join_match(match_id: str, req: PlayerRequest) -> dict[str, Any]:
    """対局に参加する。先手 → 後手の順に席が埋まる。"""
    entry = _get_match(match_id)
    match: ShogiMatch = entry["match"]
    try:
        color = match.join(req.player_id)
    except MatchError as exc:
        raise _error(exc) from exc
    return {"color": color.name, "state": match.snapshot()}


@app.post("/api/matches/{match_id}/start")
async def start_match(match_id: str, req: PlayerRequest) -> dict[str, Any]:
    """準備完了を通知する。AI対局では AI は常に準備完了になる。"""
    entry = _get_match(match_id)
    match: ShogiMatch = entry["match"]
    try:
        match.start(req.player_id)
        if entry["vs_engine"] and match.status == MatchStatus.WAITING_TO_START:
            match.start(ENGINE_PLAYER_ID)
    except MatchError as exc:
        raise _error(exc) from exc
    return match.snapshot()


@app.post("/api/matches/{match_id}/move")
async def make_move(match_id: str, req: MoveRequest) -> dict[str, Any]:
    """プレイヤーの手を受け取り、AI対局なら AI が応答して次の局面を返す。

    プレイヤーの手が確定した後の AI 応答の失敗はエラーにせず、
    ai_move=None と ai_error（{code, message}）で返す。
    """
    entry = _get_match(match_id)
    match: ShogiMatch = entry["match"]
    move = _to_move(req.move)
    try:
        match.apply_move(req.player_id, move)
    except MatchError as exc:
        raise _error(exc) from exc

    ai_move = None
    ai_error = None
    if (
        entry["vs_engine"]
        and match.status == MatchStatus.IN_PROGRESS
        and match.state.player(match.turn) == ENGINE_PLAYER_ID
    ):
        try:
            ai_move = _play_engine(match, ENGINE_PLAYER_ID, entry["engine_depth"])
        except MatchError as exc:
            logger.warning("Match %s: engine could not reply: %s", match_id, exc)
            ai_error = _error_body(exc)

    return {
        "state": match.snapshot(),
        "player_move": _move_to_dict(move),
        "ai_move": _move_to_dict(ai_move) if ai_move is not None else None,
        "ai_error": ai_error,
    }


@app.post("/api/matches/{match_id}/engine-move")
async def engine_move(match_id: str, req: EngineMoveRequest) -> dict[str, Any]:
    """手番側のプレイヤーに代わって AI が1手指す。"""
    entry = _get_match(match_id)
    match: ShogiMatch = entry["match"]
    if match.status != MatchStatus.IN_PROGRESS:
        raise _error(NotInProgressError())
    player_id = match.state.player(match.turn)
    assert player_id is not None  # 対局中は両方の席が埋まっている
    depth = entry["engine_depth"] if req.depth is None else SEARCH_CONFIG.clamp(req.depth)
    try:
        move = _play_engine(match, player_id, depth)
    except MatchError as exc:
        raise _error(exc) from exc
    return {"state": match.snapshot(), "move": _move_to_dict(move)}


@app.post("/api/matches/{match_id}/leave")
async def leave_match(match_id: str, req: PlayerRequest) -> dict[str, Any]:
    """退出する。対局中なら相手の勝ちで終局する。"""
    entry = _get_match(match_id)
    match: ShogiMatch = entry["match"]
    try:
        match.leave(req.player_id)
    except MatchError as exc:
        raise _error(exc) from exc
    return match.snapshot()


@app.get("/api/matches/{match_id}")
async def get_match(match_id: str) -> dict[str, Any]:
    """現在の局面情報を取得する（ページ再読み込み時などに使用）。"""
    return _get_match(match_id)["match"].snapshot()


@app.get("/api/matches/{match_id}/valid-moves")
async def valid_moves(match_id: str, row: int, col: int) -> list[dict[str, Any]]:
    """マス(row, col)の駒の合法手を返す（駒を選択したときのハイライト用）。"""
    match: ShogiMatch = _get_match(match_id)["match"]
    return [_move_to_dict(m) for m in match.valid_moves_from(row, col)]


@app.get("/api/history")
async def history() -> list[dict[str, Any]]:
    """終局した対局の結果一覧。"""
    return list(_history)


def main() -> None:
    """Run the web server.

    `uv run shogi-web` または `python -m shogi_engine.web.app` で起動する。
    """
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
