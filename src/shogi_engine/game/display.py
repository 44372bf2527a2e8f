"""Terminal display for 本将棋."""

from __future__ import annotations

from shogi_engine.game.board import Board
from shogi_engine.game.types import COLS, ROWS, Color, Kind, Piece

# Display characters for pieces
_KIND_CHARS: dict[Kind, str] = {
    Kind.PAWN: "歩",
    Kind.LANCE: "香",
    Kind.KNIGHT: "桂",
    Kind.SILVER: "銀",
    Kind.GOLD: "金",
    Kind.BISHOP: "角",
    Kind.ROOK: "飛",
    Kind.KING: "玉",
}

_PROMOTED_CHARS: dict[Kind, str] = {
    Kind.PAWN: "と",
    Kind.LANCE: "杏",
    Kind.KNIGHT: "圭",
    Kind.SILVER: "全",
    Kind.BISHOP: "馬",
    Kind.ROOK: "龍",
}

_ROW_LABELS = ["一", "二", "三", "四", "五", "六", "七", "八", "九"]


def piece_char(piece: Piece) -> str:
    """駒の漢字1文字を返す。"""
    if piece.promoted:
        return _PROMOTED_CHARS[piece.kind]
    return _KIND_CHARS[piece.kind]


def format_board(board: Board) -> str:
    """Format the board for terminal display.

    後手の駒には "v" を付ける。列番号は左から 0〜8（プログラム上の col）。
    """
    lines: list[str] = []

    lines.append(f"後手持駒: {_format_hand(board, Color.WHITE)}")
    lines.append("  " + "  ".join(str(c) for c in range(COLS)))
    lines.append("+--" * COLS + "+")

    for r in range(ROWS):
        row_str = "|"
        for c in range(COLS):
            piece = board.piece_at(r, c)
            if piece is None:
                row_str += "  |"
            elif piece.color == Color.WHITE:
                row_str += f"v{piece_char(piece)}|"
            else:
                row_str += f" {piece_char(piece)}|"
        lines.append(f"{row_str} {_ROW_LABELS[r]}({r})")
        lines.append("+--" * COLS + "+")

    lines.append(f"先手持駒: {_format_hand(board, Color.BLACK)}")
    return "\n".join(lines)


def _format_hand(board: Board, color: Color) -> str:
    hand = board.hand(color)
    if not hand:
        return "なし"
    pieces: list[str] = []
    for kind in sorted(set(hand)):
        count = hand.count(kind)
        char = _KIND_CHARS[kind]
        pieces.append(char if count == 1 else f"{char}{count}")
    return " ".join(pieces)
