"""Legal move generation for 本将棋.

合法手の列挙。候補マスは方向表から作り、最終的な判定は moves.is_legal() に任せる。
列挙順は決定的で、探索エンジンの同点時の手選択はこの順序に従う:
  1. 盤上の手: 起点マスの行優先 → 方向表の順 → 成る手を先に
  2. 打ち手:   駒種順 → マスの行優先
"""

from __future__ import annotations

from shogi_engine.game.board import Board
from shogi_engine.game.check import is_drop_pawn_mate, is_in_check
from shogi_engine.game.moves import BoardMove, DropMove, Move, apply_move, is_legal
from shogi_engine.game.types import (
    COLS,
    HAND_KINDS,
    MOVEMENTS,
    NUM_SQUARES,
    Color,
    Coord,
    in_bounds,
)


def candidate_targets(board: Board, from_sq: Coord) -> list[Coord]:
    """Return destinations reachable by the piece's movement pattern.

    自駒で止まり、敵駒は取ったところで止まる。成りの可否は考慮しない。
    from_sq が盤外か空なら空リスト。
    """
    if not in_bounds(*from_sq):
        return []
    piece = board.piece_at(*from_sq)
    if piece is None:
        return []
    movement = MOVEMENTS[(piece.kind, piece.promoted)]
    flip = -piece.color.forward
    row, col = from_sq
    targets: list[Coord] = []

    for dr, dc in movement.steps:
        nr, nc = row + dr * flip, col + dc
        if in_bounds(nr, nc) and (nr, nc) not in targets:
            targets.append((nr, nc))

    for dr, dc in movement.slides:
        dr *= flip
        nr, nc = row + dr, col + dc
        while in_bounds(nr, nc):
            if (nr, nc) not in targets:
                targets.append((nr, nc))
            if board.piece_at(nr, nc) is not None:
                break  # 駒に当たったらそこで止まる
            nr, nc = nr + dr, nc + dc
    return targets


def _board_moves_from(board: Board, from_sq: Coord, color: Color) -> list[BoardMove]:
    moves: list[BoardMove] = []
    for to_sq in candidate_targets(board, from_sq):
        # 成る手を先に、成らない手を後に並べる
        for promote in (True, False):
            move = BoardMove(from_sq, to_sq, promote)
            if is_legal(board, move, color):
                moves.append(move)
    return moves


def pseudo_legal_moves(
    board: Board,
    color: Color,
    include_drops: bool = True,
) -> list[Move]:
    """Generate every move is_legal() accepts (may leave own king in check)."""
    moves: list[Move] = []
    for from_sq, _piece in board.pieces(color):
        moves.extend(_board_moves_from(board, from_sq, color))

    if include_drops:
        in_hand = set(board.hand(color))
        for kind in HAND_KINDS:
            if kind not in in_hand:
                continue
            for idx in range(NUM_SQUARES):
                drop = DropMove(kind, (idx // COLS, idx % COLS))
                if is_legal(board, drop, color):
                    moves.append(drop)
    return moves


def legal_moves(
    board: Board,
    color: Color,
    include_drops: bool = True,
) -> list[Move]:
    """Generate all legal moves (excluding self-check and 打ち歩詰め)."""
    legal: list[Move] = []
    for move in pseudo_legal_moves(board, color, include_drops):
        if is_in_check(apply_move(board, move, color), color):
            continue
        if is_drop_pawn_mate(board, move, color):
            continue
        legal.append(move)
    return legal


def moves_from(board: Board, row: int, col: int) -> list[BoardMove]:
    """Return the legal board moves of the piece at (row, col).

    UI で駒を選んだときに移動可能マスを表示するために使う。
    マスが盤外か空なら空リスト。
    """
    if not in_bounds(row, col):
        return []
    piece = board.piece_at(row, col)
    if piece is None:
        return []
    return [
        move
        for move in _board_moves_from(board, (row, col), piece.color)
        if not is_in_check(apply_move(board, move, piece.color), piece.color)
    ]
