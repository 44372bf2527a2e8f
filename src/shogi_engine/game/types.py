"""Types and constants for the 9x9 shogi rules engine.

本将棋（9×9盤）の基本型・定数定義。
駒は「種類 + 成りフラグ + 手番色」のタグ付き値で表す。
文字列表記（'+P', 'p', 'K' など）は notation モジュールの境界だけで使う。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, unique

ROWS = 9
COLS = 9
NUM_SQUARES = ROWS * COLS  # 81マス

Coord = tuple[int, int]  # (row, col)


@unique
class Color(IntEnum):
    """Side identifiers.

    先手（BLACK）は下側から上に向かって進む（row 8 → row 0）。
    後手（WHITE）は上側から下に向かって進む（row 0 → row 8）。
    """

    BLACK = 0  # 先手
    WHITE = 1  # 後手

    @property
    def opponent(self) -> Color:
        """相手の色を返す。"""
        return Color(1 - self.value)

    @property
    def forward(self) -> int:
        """前進方向の行の増分（先手は -1、後手は +1）。"""
        return -1 if self == Color.BLACK else 1


@unique
class Kind(IntEnum):
    """Piece kinds（8種類）.

    成り駒は別の種類ではなく Piece.promoted で表す。
    値の順序は持ち駒のソート順・打ち手の列挙順に使う。
    """

    PAWN = 0    # 歩
    LANCE = 1   # 香
    KNIGHT = 2  # 桂
    SILVER = 3  # 銀
    GOLD = 4    # 金
    BISHOP = 5  # 角
    ROOK = 6    # 飛
    KING = 7    # 玉


# 成れる駒（王と金は成れない）
PROMOTABLE: frozenset[Kind] = frozenset(
    {Kind.PAWN, Kind.LANCE, Kind.KNIGHT, Kind.SILVER, Kind.BISHOP, Kind.ROOK}
)

# 持ち駒として打てる駒種（玉以外の7種）
HAND_KINDS: tuple[Kind, ...] = (
    Kind.PAWN, Kind.LANCE, Kind.KNIGHT, Kind.SILVER,
    Kind.GOLD, Kind.BISHOP, Kind.ROOK,
)


@dataclass(frozen=True)
class Piece:
    """A piece token on the board.

    盤上の駒。種類・所有者・成りフラグを持つ。
    """

    kind: Kind
    color: Color
    promoted: bool = False

    def __post_init__(self) -> None:
        if self.promoted and self.kind not in PROMOTABLE:
            msg = f"{self.kind.name} cannot be promoted"
            raise ValueError(msg)

    def promote(self) -> Piece:
        """成った駒を返す。"""
        return Piece(self.kind, self.color, promoted=True)

    def demote(self) -> Piece:
        """成りを解除した駒を返す（持ち駒に戻す際に使用）。"""
        return Piece(self.kind, self.color)


# 1マス移動の方向定義（先手視点、前 = 行インデックス減少方向）
# 後手の場合は行方向を反転して使う
KING_STEPS: tuple[Coord, ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)
GOLD_STEPS: tuple[Coord, ...] = ((-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, 0))
SILVER_STEPS: tuple[Coord, ...] = ((-1, -1), (-1, 0), (-1, 1), (1, -1), (1, 1))
PAWN_STEPS: tuple[Coord, ...] = ((-1, 0),)

# 桂馬のジャンプ（2マス前+左右1マス、間の駒は無視する）
KNIGHT_JUMPS: tuple[Coord, ...] = ((-2, -1), (-2, 1))

# 遠距離移動の方向
LANCE_SLIDES: tuple[Coord, ...] = ((-1, 0),)
BISHOP_SLIDES: tuple[Coord, ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ROOK_SLIDES: tuple[Coord, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


@dataclass(frozen=True)
class Movement:
    """Movement pattern of one piece variant (先手視点)."""

    steps: tuple[Coord, ...] = ()
    slides: tuple[Coord, ...] = ()


# (駒種, 成り) → 動き。龍は飛+玉、馬は角+玉。
MOVEMENTS: dict[tuple[Kind, bool], Movement] = {
    (Kind.KING, False): Movement(steps=KING_STEPS),
    (Kind.GOLD, False): Movement(steps=GOLD_STEPS),
    (Kind.SILVER, False): Movement(steps=SILVER_STEPS),
    (Kind.KNIGHT, False): Movement(steps=KNIGHT_JUMPS),
    (Kind.LANCE, False): Movement(slides=LANCE_SLIDES),
    (Kind.PAWN, False): Movement(steps=PAWN_STEPS),
    (Kind.BISHOP, False): Movement(slides=BISHOP_SLIDES),
    (Kind.ROOK, False): Movement(slides=ROOK_SLIDES),
    # 成銀・成桂・成香・と金は金と同じ動き
    (Kind.SILVER, True): Movement(steps=GOLD_STEPS),
    (Kind.KNIGHT, True): Movement(steps=GOLD_STEPS),
    (Kind.LANCE, True): Movement(steps=GOLD_STEPS),
    (Kind.PAWN, True): Movement(steps=GOLD_STEPS),
    (Kind.BISHOP, True): Movement(steps=KING_STEPS, slides=BISHOP_SLIDES),  # 馬
    (Kind.ROOK, True): Movement(steps=KING_STEPS, slides=ROOK_SLIDES),      # 龍
}


def in_bounds(row: int, col: int) -> bool:
    """(row, col) が盤内なら True。"""
    return 0 <= row < ROWS and 0 <= col < COLS


def in_promotion_zone(color: Color, row: int) -> bool:
    """Check if a row is in the promotion zone (enemy's 3 ranks)."""
    if color == Color.BLACK:
        return row <= 2
    return row >= 6


def ranks_from_far_edge(color: Color, row: int) -> int:
    """相手陣の端から数えた段数（最奥段 = 0）。"""
    return row if color == Color.BLACK else ROWS - 1 - row


def is_dead_end(kind: Kind, color: Color, row: int) -> bool:
    """行き所のない駒: その段では以後動けない未成駒なら True.

    歩・香は最奥段、桂は最奥の2段で行き所がなくなる。
    強制成りと打ち駒制限の両方で使う。
    """
    depth = ranks_from_far_edge(color, row)
    if kind in (Kind.PAWN, Kind.LANCE):
        return depth == 0
    if kind == Kind.KNIGHT:
        return depth <= 1
    return False
