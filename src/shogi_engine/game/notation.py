"""Rank notation codec.

盤面の文字列表記（SFEN の盤面部分）と 9×9 グリッドの相互変換。

表記ルール:
  - 段（row）は "/" で区切り、row 0（後手の後段）から順に並べる
  - 数字 N は N マスの空き
  - 英字は駒（大文字 = 先手、小文字 = 後手）、"+" 接頭辞は成り駒

例: 平手初期局面
  lnsgkgsnl/1r5b1/ppppppppp/9/9/9/PPPPPPPPP/1B5R1/LNSGKGSNL
"""

from __future__ import annotations

from shogi_engine.game.types import (
    COLS,
    HAND_KINDS,
    PROMOTABLE,
    ROWS,
    Color,
    Kind,
    Piece,
)

STARTING_POSITION = "lnsgkgsnl/1r5b1/ppppppppp/9/9/9/PPPPPPPPP/1B5R1/LNSGKGSNL"

Grid = tuple[tuple[Piece | None, ...], ...]

_KIND_CHARS: dict[Kind, str] = {
    Kind.KING: "k",
    Kind.ROOK: "r",
    Kind.BISHOP: "b",
    Kind.GOLD: "g",
    Kind.SILVER: "s",
    Kind.KNIGHT: "n",
    Kind.LANCE: "l",
    Kind.PAWN: "p",
}
_CHAR_KINDS: dict[str, Kind] = {v: k for k, v in _KIND_CHARS.items()}


class NotationError(ValueError):
    """Raised when a notation string cannot be parsed."""


def piece_to_char(piece: Piece) -> str:
    """駒を1〜2文字の表記に変換する（例: 先手の成り歩 → '+P'）。"""
    char = _KIND_CHARS[piece.kind]
    if piece.color == Color.BLACK:
        char = char.upper()
    return f"+{char}" if piece.promoted else char


def char_to_piece(char: str, promoted: bool = False) -> Piece:
    """1文字の駒表記を Piece に変換する。"""
    kind = _CHAR_KINDS.get(char.lower())
    if kind is None:
        raise NotationError(f"Unknown piece char: {char!r}")
    if promoted and kind not in PROMOTABLE:
        raise NotationError(f"Piece cannot be promoted: {char!r}")
    color = Color.BLACK if char.isupper() else Color.WHITE
    return Piece(kind, color, promoted)


def decode(notation: str) -> Grid:
    """Parse rank notation into a 9x9 grid.

    文字列表記を 9×9 のグリッドに変換する。
    段数や1段のマス数が 9 でない場合は NotationError を送出する
    （途中まで組み立てた盤面は返さない）。
    空白以降（手番・持ち駒フィールド）は無視する。
    """
    fields = notation.strip().split()
    if not fields:
        raise NotationError("Empty notation")
    ranks = fields[0].split("/")
    if len(ranks) != ROWS:
        raise NotationError(f"Notation must have {ROWS} ranks, got {len(ranks)}")

    grid: list[tuple[Piece | None, ...]] = []
    for rank_idx, rank in enumerate(ranks):
        cells: list[Piece | None] = []
        promoted = False
        for ch in rank:
            if promoted and not ch.isalpha():
                raise NotationError(f"Dangling '+' in rank {rank_idx}")
            if ch == "+":
                promoted = True
                continue
            if ch.isdigit():
                gap = int(ch)
                if gap == 0:
                    raise NotationError(f"Bad empty-square run in rank {rank_idx}")
                cells.extend([None] * gap)
                continue
            cells.append(char_to_piece(ch, promoted))
            promoted = False
        if promoted:
            raise NotationError(f"Dangling '+' in rank {rank_idx}")
        if len(cells) != COLS:
            raise NotationError(
                f"Rank {rank_idx} must have {COLS} cells, got {len(cells)}"
            )
        grid.append(tuple(cells))
    return tuple(grid)


def encode(grid: Grid) -> str:
    """Format a 9x9 grid as rank notation (空きマスの連続は数字にまとめる)."""
    ranks: list[str] = []
    for row in grid:
        rank = ""
        empty = 0
        for piece in row:
            if piece is None:
                empty += 1
                continue
            if empty > 0:
                rank += str(empty)
                empty = 0
            rank += piece_to_char(piece)
        if empty > 0:
            rank += str(empty)
        ranks.append(rank)
    return "/".join(ranks)


def encode_hands(hands: tuple[tuple[Kind, ...], tuple[Kind, ...]]) -> str:
    """持ち駒を文字列に変換する（先手→後手、駒種順。例: 'PPb'）。"""
    chars: list[str] = []
    for color in Color:
        for kind in sorted(hands[color.value]):
            char = _KIND_CHARS[kind]
            chars.append(char.upper() if color == Color.BLACK else char)
    return "".join(chars)


def decode_hands(text: str) -> tuple[tuple[Kind, ...], tuple[Kind, ...]]:
    """持ち駒の文字列を (先手, 後手) の駒種タプルに変換する。"""
    hands: tuple[list[Kind], list[Kind]] = ([], [])
    for ch in text.strip():
        piece = char_to_piece(ch)
        if piece.kind not in HAND_KINDS:
            raise NotationError(f"Piece cannot be held in hand: {ch!r}")
        hands[piece.color.value].append(piece.kind)
    return tuple(sorted(hands[0])), tuple(sorted(hands[1]))
