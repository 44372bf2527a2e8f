"""Typed errors raised by the match state machine.

対局管理のエラー。すべて ValueError のサブクラスで、状態を変更する前に送出される。
code 属性は呼び出し側（Web 層など）がそのままクライアントへ返すための識別子。
"""

from __future__ import annotations


class MatchError(ValueError):
    """Base class for rejected match operations."""

    code = "MATCH_ERROR"
    default_message = "Match operation rejected"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class GameFullError(MatchError):
    code = "GAME_FULL"
    default_message = "Game is full"


class AlreadyInGameError(MatchError):
    code = "ALREADY_IN_GAME"
    default_message = "Player is already in this game"


class NotInGameError(MatchError):
    code = "NOT_IN_GAME"
    default_message = "Player is not in this game"


class NotStartableError(MatchError):
    code = "NOT_STARTABLE"
    default_message = "Game is not in a startable state"


class NotInProgressError(MatchError):
    code = "NOT_IN_PROGRESS"
    default_message = "Game is not in progress"


class NotYourTurnError(MatchError):
    code = "NOT_YOUR_TURN"
    default_message = "Not your turn"


class InvalidPositionError(MatchError):
    code = "INVALID_POSITION"
    default_message = "Invalid move"


class DropPawnMateError(InvalidPositionError):
    """打ち歩詰め: a pawn drop may not deliver immediate checkmate."""

    default_message = "A pawn drop may not deliver checkmate"


class NoLegalMovesError(MatchError):
    """探索エンジンが手番側の指し手を見つけられなかった（打ち手は探索しない）。"""

    code = "NO_LEGAL_MOVES"
    default_message = "No legal moves available"
