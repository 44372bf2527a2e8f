"""Board representation for 本将棋 (9x9).

9×9盤の盤面データ構造。
イミュータブルなデータクラスで、変更メソッドは新しいオブジェクトを返す。
"""

from __future__ import annotations

from dataclasses import dataclass, field

from shogi_engine.game import notation
from shogi_engine.game.types import (
    COLS,
    NUM_SQUARES,
    ROWS,
    Color,
    Coord,
    Kind,
    Piece,
)

Hands = tuple[tuple[Kind, ...], tuple[Kind, ...]]


def _initial_squares() -> tuple[Piece | None, ...]:
    """Return the standard starting position (平手)."""
    grid = notation.decode(notation.STARTING_POSITION)
    return tuple(piece for row in grid for piece in row)


@dataclass(frozen=True)
class Board:
    """Immutable board state for 9x9 本将棋.

    squares: 81要素のタプル（行優先）。squares[row * COLS + col] でアクセス。
    hands: 2要素のタプル。hands[0]=先手の持ち駒、hands[1]=後手の持ち駒。
    """

    squares: tuple[Piece | None, ...] = field(default_factory=_initial_squares)
    hands: Hands = ((), ())

    def __post_init__(self) -> None:
        if len(self.squares) != NUM_SQUARES:
            msg = f"Board needs {NUM_SQUARES} squares, got {len(self.squares)}"
            raise ValueError(msg)

    @classmethod
    def from_grid(cls, grid: notation.Grid, hands: Hands = ((), ())) -> Board:
        """9×9 グリッドから Board を作る。"""
        return cls(squares=tuple(p for row in grid for p in row), hands=hands)

    @classmethod
    def from_notation(cls, board_text: str, hands_text: str = "") -> Board:
        """文字列表記（盤面 + 持ち駒）から Board を作る。"""
        return cls.from_grid(
            notation.decode(board_text), notation.decode_hands(hands_text)
        )

    def grid(self) -> notation.Grid:
        """盤面を 9×9 のグリッド（行のタプル）として返す。"""
        return tuple(
            self.squares[r * COLS:(r + 1) * COLS] for r in range(ROWS)
        )

    def to_notation(self) -> str:
        return notation.encode(self.grid())

    def hands_notation(self) -> str:
        return notation.encode_hands(self.hands)

    def piece_at(self, row: int, col: int) -> Piece | None:
        """マス(row, col)の駒を返す。駒がなければ None。"""
        return self.squares[row * COLS + col]

    def set_piece(self, row: int, col: int, piece: Piece | None) -> Board:
        """マス(row, col)の駒を変更した新しい Board を返す。"""
        idx = row * COLS + col
        squares = list(self.squares)
        squares[idx] = piece
        return Board(squares=tuple(squares), hands=self.hands)

    def hand(self, color: Color) -> tuple[Kind, ...]:
        return self.hands[color.value]

    def add_to_hand(self, color: Color, kind: Kind) -> Board:
        """Add a captured piece to hand.

        取った駒を持ち駒に追加する。成りは駒種に含まれないので、
        駒種だけを記録すれば自動的に成りが解除される。
        """
        if kind == Kind.KING:
            raise ValueError("King cannot be held in hand")
        hands = list(self.hands)
        hand = list(hands[color.value])
        hand.append(kind)
        hand.sort()  # 一意な順序を保つ
        hands[color.value] = tuple(hand)
        return Board(squares=self.squares, hands=(hands[0], hands[1]))

    def remove_from_hand(self, color: Color, kind: Kind) -> Board:
        """持ち駒から1枚取り除いた新しい Board を返す。"""
        hands = list(self.hands)
        hand = list(hands[color.value])
        hand.remove(kind)
        hands[color.value] = tuple(hand)
        return Board(squares=self.squares, hands=(hands[0], hands[1]))

    def find_king(self, color: Color) -> Coord | None:
        """Return the king's (row, col), or None if it is missing.

        王将のマスを返す。王手判定や詰み判定に使用する。
        """
        for idx, piece in enumerate(self.squares):
            if piece is not None and piece.kind == Kind.KING and piece.color == color:
                return idx // COLS, idx % COLS
        return None

    def has_pawn_in_column(self, color: Color, col: int) -> bool:
        """Check for an unpromoted pawn of color in a column (二歩 check).

        と金は歩として数えない。
        """
        for r in range(ROWS):
            p = self.piece_at(r, col)
            if (
                p is not None
                and p.color == color
                and p.kind == Kind.PAWN
                and not p.promoted
            ):
                return True
        return False

    def pieces(self, color: Color) -> list[tuple[Coord, Piece]]:
        """指定色の盤上の駒を (マス, 駒) のリストで返す（行優先順）。"""
        result: list[tuple[Coord, Piece]] = []
        for idx, piece in enumerate(self.squares):
            if piece is not None and piece.color == color:
                result.append(((idx // COLS, idx % COLS), piece))
        return result
