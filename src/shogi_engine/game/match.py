"""Turn-taking match state machine for 本将棋.

対局の状態遷移を管理する。

状態:  WAITING_FOR_PLAYERS → WAITING_TO_START → IN_PROGRESS → OVER（終端）

MatchState はイミュータブルで、ShogiMatch は各操作の最後に新しい状態へ
一度だけ差し替える（_commit）。検証に失敗した操作は例外を送出し、状態は変わらない。
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum, unique
from typing import Any

from shogi_engine.game.board import Board
from shogi_engine.game.check import is_checkmate, is_in_check
from shogi_engine.game.errors import (
    AlreadyInGameError,
    DropPawnMateError,
    GameFullError,
    InvalidPositionError,
    NotInGameError,
    NotInProgressError,
    NotStartableError,
    NotYourTurnError,
)
from shogi_engine.game.movegen import legal_moves, moves_from
from shogi_engine.game.moves import (
    BoardMove,
    DropMove,
    Move,
    apply_move,
    format_move,
    is_legal,
)
from shogi_engine.game.notation import piece_to_char
from shogi_engine.game.types import Color, Kind

logger = logging.getLogger(__name__)


@unique
class MatchStatus(str, Enum):
    """Lifecycle of a match."""

    WAITING_FOR_PLAYERS = "WAITING_FOR_PLAYERS"
    WAITING_TO_START = "WAITING_TO_START"
    IN_PROGRESS = "IN_PROGRESS"
    OVER = "OVER"


@dataclass(frozen=True)
class MatchState:
    """Immutable snapshot of a match.

    手番は保存せず move_count の偶奇から導出する（偶数 = 先手番）。
    """

    board: Board = field(default_factory=Board)
    black: str | None = None
    white: str | None = None
    black_ready: bool = False
    white_ready: bool = False
    move_count: int = 0
    status: MatchStatus = MatchStatus.WAITING_FOR_PLAYERS
    winner: str | None = None

    @property
    def turn(self) -> Color:
        """現在の手番の色。"""
        return Color.BLACK if self.move_count % 2 == 0 else Color.WHITE

    def player(self, color: Color) -> str | None:
        return self.black if color == Color.BLACK else self.white

    def color_of(self, player_id: str) -> Color | None:
        """プレイヤーの色を返す。対局者でなければ None。"""
        if self.black == player_id:
            return Color.BLACK
        if self.white == player_id:
            return Color.WHITE
        return None


@dataclass(frozen=True)
class MatchResult:
    """Outcome handed to the persistence collaborator when a match ends.

    winner が None なら引き分け（現在のルールでは発生しない）。
    """

    winner: str | None
    participants: tuple[str, ...]


class ShogiMatch:
    """A single shogi match between two players.

    同じ対局への操作は呼び出し側で直列化すること（このクラスはスレッドセーフではない）。
    異なる対局どうしは状態を共有しない。
    """

    def __init__(
        self,
        board: Board | None = None,
        on_over: Callable[[MatchResult], None] | None = None,
        match_id: str | None = None,
    ) -> None:
        self.match_id = match_id or str(uuid.uuid4())[:8]
        self._state = MatchState(board=board if board is not None else Board())
        self._on_over = on_over

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def board(self) -> Board:
        return self._state.board

    @property
    def status(self) -> MatchStatus:
        return self._state.status

    @property
    def turn(self) -> Color:
        return self._state.turn

    def player_color(self, player_id: str) -> Color | None:
        return self._state.color_of(player_id)

    def _commit(self, new_state: MatchState) -> None:
        """唯一の状態更新ポイント。終局への遷移時に結果を通知する。"""
        finished = (
            new_state.status == MatchStatus.OVER
            and self._state.status != MatchStatus.OVER
        )
        self._state = new_state
        if finished:
            participants = tuple(p for p in (new_state.black, new_state.white) if p)
            logger.info(
                "Match %s over after %d moves, winner=%s",
                self.match_id,
                new_state.move_count,
                new_state.winner,
            )
            if self._on_over is not None:
                self._on_over(MatchResult(new_state.winner, participants))

    def join(self, player_id: str, color: Color | None = None) -> Color:
        """Seat a player in the first free slot (先手 → 後手の順).

        color を指定した場合はその席だけを試す（AI を後手に座らせる場合など）。
        Returns the color assigned to the player.
        """
        state = self._state
        if state.color_of(player_id) is not None:
            raise AlreadyInGameError()
        if state.status == MatchStatus.OVER:
            raise GameFullError("Game is already over")

        if state.black is None and color in (None, Color.BLACK):
            new_state = replace(state, black=player_id)
            color = Color.BLACK
        elif state.white is None and color in (None, Color.WHITE):
            new_state = replace(state, white=player_id)
            color = Color.WHITE
        else:
            raise GameFullError()

        both_seated = new_state.black is not None and new_state.white is not None
        new_state = replace(
            new_state,
            status=(
                MatchStatus.WAITING_TO_START
                if both_seated
                else MatchStatus.WAITING_FOR_PLAYERS
            ),
        )
        logger.debug("Match %s: %s joined as %s", self.match_id, player_id, color.name)
        self._commit(new_state)
        return color

    def start(self, player_id: str) -> None:
        """Mark a player as ready; the match starts once both are ready.

        既に準備完了のプレイヤーが再度呼んでもエラーにはならない。
        """
        state = self._state
        if state.status != MatchStatus.WAITING_TO_START:
            raise NotStartableError()
        color = state.color_of(player_id)
        if color is None:
            raise NotInGameError()

        if color == Color.BLACK:
            new_state = replace(state, black_ready=True)
        else:
            new_state = replace(state, white_ready=True)
        if new_state.black_ready and new_state.white_ready:
            new_state = replace(new_state, status=MatchStatus.IN_PROGRESS)
            logger.debug("Match %s started", self.match_id)
        self._commit(new_state)

    def apply_move(self, player_id: str, move: Move) -> MatchState:
        """Validate and commit a move for ``player_id``.

        検証の順序:
          1. 対局中か（NOT_IN_PROGRESS）
          2. 対局者か（NOT_IN_GAME）
          3. 手番か（NOT_YOUR_TURN）
          4. 駒の動き・打ち駒のルール（INVALID_POSITION）
          5. 自玉を王手にさらさないか（INVALID_POSITION）
          6. 打ち歩詰めでないか（DropPawnMateError）
        確定後、相手玉が王手かつ逃げ場なしなら終局（手番側の勝ち）。
        """
        state = self._state
        if state.status != MatchStatus.IN_PROGRESS:
            raise NotInProgressError()
        color = state.color_of(player_id)
        if color is None:
            raise NotInGameError()
        if color != state.turn:
            raise NotYourTurnError()

        if not is_legal(state.board, move, color):
            raise InvalidPositionError(f"Illegal move: {format_move(move)}")
        after = apply_move(state.board, move, color)
        if is_in_check(after, color):
            raise InvalidPositionError(
                f"Move leaves own king in check: {format_move(move)}"
            )

        opponent = color.opponent
        mated = is_in_check(after, opponent) and is_checkmate(after, opponent)
        if mated and isinstance(move, DropMove) and move.kind == Kind.PAWN:
            raise DropPawnMateError()

        new_state = replace(state, board=after, move_count=state.move_count + 1)
        if mated:
            new_state = replace(new_state, status=MatchStatus.OVER, winner=player_id)
        logger.debug(
            "Match %s: move %d by %s %s",
            self.match_id,
            new_state.move_count,
            color.name,
            format_move(move),
        )
        self._commit(new_state)
        return new_state

    def leave(self, player_id: str) -> None:
        """Remove a player; leaving a running match forfeits it.

        対局中に退出すると相手の勝ちで終局する（対局者の記録は結果通知のため残す）。
        対局開始前なら席と準備フラグを空ける。終局後は何もしない。
        """
        state = self._state
        if state.status == MatchStatus.OVER:
            return
        color = state.color_of(player_id)
        if color is None:
            raise NotInGameError()

        if state.status == MatchStatus.IN_PROGRESS:
            new_state = replace(
                state,
                status=MatchStatus.OVER,
                winner=state.player(color.opponent),
            )
        elif color == Color.BLACK:
            new_state = replace(
                state,
                black=None,
                black_ready=False,
                status=MatchStatus.WAITING_FOR_PLAYERS,
            )
        else:
            new_state = replace(
                state,
                white=None,
                white_ready=False,
                status=MatchStatus.WAITING_FOR_PLAYERS,
            )
        logger.debug("Match %s: %s left", self.match_id, player_id)
        self._commit(new_state)

    def legal_moves(self) -> list[Move]:
        """手番側の合法手（打ち手を含む）。"""
        return legal_moves(self._state.board, self._state.turn)

    def valid_moves_from(self, row: int, col: int) -> list[BoardMove]:
        """マス(row, col)の駒の合法な移動先。"""
        return moves_from(self._state.board, row, col)

    def snapshot(self) -> dict[str, Any]:
        """Convert the match to a JSON-serializable dict for renderers.

        描画側（フロントエンドなど）が読む局面情報。
        """
        state = self._state
        board = state.board
        squares: list[str | None] = [
            None if piece is None else piece_to_char(piece) for piece in board.squares
        ]
        return {
            "match_id": self.match_id,
            "sfen": board.to_notation(),
            "inhand": board.hands_notation(),
            "squares": squares,
            "hands": [[kind.name for kind in board.hand(color)] for color in Color],
            "status": state.status.value,
            "move_count": state.move_count,
            "turn": state.turn.name,
            "black": state.black,
            "white": state.white,
            "black_ready": state.black_ready,
            "white_ready": state.white_ready,
            "winner": state.winner,
            "in_check": (
                state.status == MatchStatus.IN_PROGRESS
                and is_in_check(board, state.turn)
            ),
        }
