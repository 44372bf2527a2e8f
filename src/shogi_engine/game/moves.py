"""Move representation and legality validation for 本将棋.

指し手は2種類:
  BoardMove: 盤上の駒を動かす手（from_sq → to_sq、成りフラグ付き）
  DropMove:  持ち駒を打つ手（駒種 → to_sq）

is_legal() は手番や王手放置を考慮しない「駒の動き・ルール上の」合法性だけを判定する。
王手放置の禁止は movegen.legal_moves() と対局管理（match）側で扱う。
"""

from __future__ import annotations

from dataclasses import dataclass

from shogi_engine.game.board import Board
from shogi_engine.game.types import (
    MOVEMENTS,
    PROMOTABLE,
    Color,
    Coord,
    Kind,
    Piece,
    in_bounds,
    in_promotion_zone,
    is_dead_end,
)


@dataclass(frozen=True)
class BoardMove:
    """A move of a piece already on the board."""

    from_sq: Coord
    to_sq: Coord
    promote: bool = False


@dataclass(frozen=True)
class DropMove:
    """A drop of a piece from the mover's hand onto an empty square."""

    kind: Kind
    to_sq: Coord


Move = BoardMove | DropMove


def is_legal(board: Board, move: Move, color: Color) -> bool:
    """Return True if ``move`` obeys the piece and drop rules for ``color``.

    手番・王手の状態に依存しない合法性判定（純粋関数）。
    自玉を王手にさらす手かどうかはここでは判定しない。
    """
    if isinstance(move, DropMove):
        return _is_legal_drop(board, move, color)
    return _is_legal_board_move(board, move, color)


def _is_legal_board_move(board: Board, move: BoardMove, color: Color) -> bool:
    (fr, fc), (tr, tc) = move.from_sq, move.to_sq
    if not (in_bounds(fr, fc) and in_bounds(tr, tc)):
        return False
    if (fr, fc) == (tr, tc):
        return False

    piece = board.piece_at(fr, fc)
    if piece is None or piece.color != color:
        return False

    # 移動先に自分の駒があれば不可（駒ごとの判定より先に適用）
    target = board.piece_at(tr, tc)
    if target is not None and target.color == color:
        return False

    if move.promote:
        if piece.promoted or piece.kind not in PROMOTABLE:
            return False
        if not (in_promotion_zone(color, fr) or in_promotion_zone(color, tr)):
            return False
    elif not piece.promoted and is_dead_end(piece.kind, color, tr):
        # 強制成り: 行き所のない段へ成らずに進むことはできない
        return False

    return reaches(board, piece, move.from_sq, move.to_sq)


def reaches(board: Board, piece: Piece, from_sq: Coord, to_sq: Coord) -> bool:
    """Check if ``piece`` at ``from_sq`` can move to ``to_sq`` geometrically.

    駒の動き（1マス移動・桂馬跳び・遠距離移動）だけを判定する。
    遠距離移動は途中のマスがすべて空いている必要がある。
    """
    movement = MOVEMENTS[(piece.kind, piece.promoted)]
    # 方向表は先手視点なので、後手は行方向を反転する
    flip = -piece.color.forward
    dr = (to_sq[0] - from_sq[0]) * flip
    dc = to_sq[1] - from_sq[1]

    if (dr, dc) in movement.steps:
        return True

    for sr, sc in movement.slides:
        distance = _slide_distance(dr, dc, sr, sc)
        if distance is None:
            continue
        for i in range(1, distance):
            r = from_sq[0] + sr * flip * i
            c = from_sq[1] + sc * i
            if board.piece_at(r, c) is not None:
                return False
        return True
    return False


def _slide_distance(dr: int, dc: int, sr: int, sc: int) -> int | None:
    """(dr, dc) == k * (sr, sc) となる正の整数 k を返す。なければ None。"""
    if sr == 0:
        if dr != 0 or dc == 0 or (dc > 0) != (sc > 0):
            return None
        return abs(dc)
    if dr == 0 or (dr > 0) != (sr > 0):
        return None
    k = abs(dr)
    if dc != sc * k:
        return None
    return k


def _is_legal_drop(board: Board, move: DropMove, color: Color) -> bool:
    tr, tc = move.to_sq
    if not in_bounds(tr, tc):
        return False
    if move.kind == Kind.KING or move.kind not in board.hand(color):
        return False
    if board.piece_at(tr, tc) is not None:
        return False
    # 二歩: 未成の自分の歩がある筋には歩を打てない
    if move.kind == Kind.PAWN and board.has_pawn_in_column(color, tc):
        return False
    # 行き所のない駒は打てない
    if is_dead_end(move.kind, color, tr):
        return False
    return True


def apply_move(board: Board, move: Move, color: Color) -> Board:
    """Apply a move without validating it.

    手を盤面に適用した新しい Board を返す。
    取った駒は成りを解除して手番側の持ち駒に加える。
    """
    if isinstance(move, DropMove):
        tr, tc = move.to_sq
        new_board = board.remove_from_hand(color, move.kind)
        return new_board.set_piece(tr, tc, Piece(move.kind, color))

    (fr, fc), (tr, tc) = move.from_sq, move.to_sq
    piece = board.piece_at(fr, fc)
    if piece is None:
        raise ValueError(f"No piece at {move.from_sq}")

    new_board = board
    target = board.piece_at(tr, tc)
    if target is not None:
        # 持ち駒は駒種だけを記録するので、成り駒は自動的に元に戻る
        new_board = new_board.add_to_hand(color, target.kind)

    moved = piece.promote() if move.promote else piece
    new_board = new_board.set_piece(fr, fc, None)
    return new_board.set_piece(tr, tc, moved)


def format_move(move: Move) -> str:
    """Format a move for display (例: '(6,4)->(5,4)', 'Pawn*(4,4)')."""
    if isinstance(move, DropMove):
        tr, tc = move.to_sq
        return f"{move.kind.name.capitalize()}*({tr},{tc})"
    (fr, fc), (tr, tc) = move.from_sq, move.to_sq
    suffix = "+" if move.promote else ""
    return f"({fr},{fc})->({tr},{tc}){suffix}"
