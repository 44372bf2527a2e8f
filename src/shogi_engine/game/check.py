"""Check and checkmate detection.

王手・詰みの判定。

詰み判定は「王手されている玉に逃げるマスがあるか」だけを見る簡略版。
合駒（間に駒を打つ・動かす）や王手している駒を取る手は考慮しない。
"""

from __future__ import annotations

import logging

from shogi_engine.game.board import Board
from shogi_engine.game.moves import BoardMove, DropMove, Move, apply_move, is_legal
from shogi_engine.game.types import KING_STEPS, Color, Kind, in_bounds

logger = logging.getLogger(__name__)


def is_in_check(board: Board, color: Color) -> bool:
    """Check if ``color``'s king is attacked by any opposing piece.

    相手の駒のどれかが玉のマスへ合法に動けるなら王手。
    成る手・成らない手のどちらかが合法なら利きがあるとみなす
    （最奥段の歩による王手など、成りが必須の利きを取りこぼさないため）。
    """
    king_sq = board.find_king(color)
    if king_sq is None:
        logger.warning("No %s king on board; treating as not in check", color.name)
        return False

    opponent = color.opponent
    for from_sq, _piece in board.pieces(opponent):
        for promote in (False, True):
            if is_legal(board, BoardMove(from_sq, king_sq, promote), opponent):
                return True
    return False


def is_checkmate(board: Board, color: Color) -> bool:
    """Check if ``color``'s king has no adjacent escape square.

    玉の周囲8マスそれぞれについて、玉がそこへ動いた局面を作り、
    まだ王手なら逃げ場なしとする。盤外と自駒のマスは逃げ場にならない。
    """
    king_sq = board.find_king(color)
    if king_sq is None:
        logger.warning("No %s king on board; treating as not checkmated", color.name)
        return False

    row, col = king_sq
    for dr, dc in KING_STEPS:
        nr, nc = row + dr, col + dc
        if not in_bounds(nr, nc):
            continue
        occupant = board.piece_at(nr, nc)
        if occupant is not None and occupant.color == color:
            continue
        escaped = apply_move(board, BoardMove(king_sq, (nr, nc)), color)
        if not is_in_check(escaped, color):
            return False
    return True


def is_drop_pawn_mate(board: Board, move: Move, color: Color) -> bool:
    """打ち歩詰め: the pawn drop gives check and leaves no king escape.

    board は手を指す前の局面。手を適用した後に相手玉が王手かつ詰みなら True。
    """
    if not isinstance(move, DropMove) or move.kind != Kind.PAWN:
        return False
    after = apply_move(board, move, color)
    opponent = color.opponent
    return is_in_check(after, opponent) and is_checkmate(after, opponent)
