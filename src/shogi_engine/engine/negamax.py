"""Fixed-depth negamax search for the computer opponent.

ネガマックス法による固定深さ探索（枝刈りなし）。
カジュアルな対戦相手として浅い深さ（3以下）で使う想定。
"""

from __future__ import annotations

from dataclasses import dataclass

from shogi_engine.game.board import Board
from shogi_engine.game.movegen import legal_moves
from shogi_engine.game.moves import Move, apply_move
from shogi_engine.game.types import Color, Kind

# 駒の価値テーブル（材料評価に使用）: (駒種, 成り) → 価値
# 玉に圧倒的に高い値を設定することで玉の保護を最優先させる
PIECE_VALUES: dict[tuple[Kind, bool], float] = {
    (Kind.PAWN, False): 1.0,
    (Kind.PAWN, True): 7.0,  # と金
    (Kind.LANCE, False): 3.0,
    (Kind.LANCE, True): 6.0,
    (Kind.KNIGHT, False): 4.0,
    (Kind.KNIGHT, True): 6.0,
    (Kind.SILVER, False): 5.0,
    (Kind.SILVER, True): 6.0,
    (Kind.GOLD, False): 6.0,
    (Kind.BISHOP, False): 8.0,
    (Kind.BISHOP, True): 10.0,  # 馬
    (Kind.ROOK, False): 9.0,
    (Kind.ROOK, True): 11.0,  # 龍
    (Kind.KING, False): 1000.0,
}

# 合法手がない局面（詰み）の評価値
MATE_SCORE = 10000.0


@dataclass(frozen=True)
class SearchConfig:
    """Configuration for the negamax opponent.

    depth:     既定の探索深さ
    max_depth: 外部から指定された深さの上限（計算時間は深さに対して指数的に増える）
    """

    depth: int = 2
    max_depth: int = 3

    def clamp(self, depth: int | None) -> int:
        """Return a usable depth in [1, max_depth] (None → 既定値)."""
        if depth is None:
            return self.depth
        return max(1, min(depth, self.max_depth))


def evaluate(board: Board, color: Color) -> float:
    """Evaluate a position from ``color``'s perspective.

    局面を color の視点から数値評価する（静的評価関数）。
    自分の駒は +価値、相手の駒は -価値。持ち駒も未成の価値で数える。
    """
    score = 0.0
    for piece in board.squares:
        if piece is None:
            continue
        value = PIECE_VALUES[(piece.kind, piece.promoted)]
        score += value if piece.color == color else -value

    for owner in Color:
        for kind in board.hand(owner):
            value = PIECE_VALUES[(kind, False)]
            score += value if owner == color else -value
    return score


def negamax(board: Board, color: Color, depth: int) -> float:
    """Plain negamax search (no pruning).

    常に「手番側（color）にとっての評価値」を返す。
    子局面の評価値は相手視点なので符号を反転して比較する。
    打ち手は探索対象に含めない。
    """
    if depth == 0:
        return evaluate(board, color)

    moves = legal_moves(board, color, include_drops=False)
    if not moves:
        # 動かせる手がない = 負け
        return -MATE_SCORE

    best_score = float("-inf")
    for move in moves:
        child = apply_move(board, move, color)
        score = -negamax(child, color.opponent, depth - 1)
        best_score = max(best_score, score)
    return best_score


def best_move(board: Board, color: Color, depth: int) -> Move:
    """Return the best move for ``color`` using negamax search.

    最善手を返す。同点の場合は列挙順で最初に見つかった手を選ぶ。
    状態は変更しない。
    """
    if depth < 1:
        raise ValueError(f"Search depth must be >= 1, got {depth}")
    moves = legal_moves(board, color, include_drops=False)
    if not moves:
        raise ValueError("No legal moves available")

    chosen = moves[0]
    best_score = float("-inf")
    for move in moves:
        child = apply_move(board, move, color)
        # 相手番の評価値を符号反転して自分の視点に変換（ネガマックスの核心）
        score = -negamax(child, color.opponent, depth - 1)
        if score > best_score:
            best_score = score
            chosen = move
    return chosen
