"""本将棋 (Shogi) rules engine: 9x9 board, drops, promotion, match flow."""

from shogi_engine.game.board import Board
from shogi_engine.game.check import is_checkmate, is_in_check
from shogi_engine.game.errors import MatchError
from shogi_engine.game.match import MatchResult, MatchState, MatchStatus, ShogiMatch
from shogi_engine.game.movegen import legal_moves
from shogi_engine.game.moves import BoardMove, DropMove, Move, is_legal
from shogi_engine.game.notation import STARTING_POSITION, decode, encode
from shogi_engine.game.types import COLS, ROWS, Color, Kind, Piece

__all__ = [
    "Board",
    "BoardMove",
    "COLS",
    "Color",
    "DropMove",
    "Kind",
    "MatchError",
    "MatchResult",
    "MatchState",
    "MatchStatus",
    "Move",
    "Piece",
    "ROWS",
    "STARTING_POSITION",
    "ShogiMatch",
    "decode",
    "encode",
    "is_checkmate",
    "is_in_check",
    "is_legal",
    "legal_moves",
]
