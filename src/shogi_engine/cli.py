"""CLI entry point for shogi-engine: Human vs negamax engine.

コマンドラインで動く本将棋対局プログラム。
プレイヤー（先手）対ネガマックスAI（後手）で対局できる。

起動方法: `uv run shogi-cli [depth]`
"""

from __future__ import annotations

import sys

from shogi_engine.engine.negamax import SearchConfig, best_move
from shogi_engine.game.display import format_board
from shogi_engine.game.errors import MatchError
from shogi_engine.game.match import MatchStatus, ShogiMatch
from shogi_engine.game.moves import format_move
from shogi_engine.game.types import Color

HUMAN = "human"
ENGINE = "engine"


def main(argv: list[str] | None = None) -> None:
    """Run a Human (BLACK) vs engine (WHITE) game.

    ゲームの流れ:
    1. 盤面を表示
    2. 合法手一覧を表示して番号入力を求める
    3. AI が応答する
    4. 終局まで繰り返す
    """
    args = sys.argv[1:] if argv is None else argv
    config = SearchConfig()
    try:
        depth = config.clamp(int(args[0])) if args else config.depth
    except ValueError:
        print(f"Invalid depth: {args[0]!r}")
        return

    print("=== 本将棋 ===")
    print(f"You are BLACK (先手). Engine is WHITE (後手), depth={depth}.")
    print()

    match = ShogiMatch()
    match.join(HUMAN)
    match.join(ENGINE)
    match.start(HUMAN)
    match.start(ENGINE)

    while match.status == MatchStatus.IN_PROGRESS:
        print(format_board(match.board))
        print()

        if match.turn == Color.BLACK:
            moves = match.legal_moves()
            if not moves:
                print("No legal moves left.")
                break
            print("Legal moves:")
            for i, m in enumerate(moves):
                print(f"  {i}: {format_move(m)}")
            print()

            # 入力検証ループ（正しい番号が入力されるまで繰り返す）
            while True:
                try:
                    choice = input("Your move (number, q to resign): ")
                    if choice.strip().lower() == "q":
                        match.leave(HUMAN)
                        break
                    idx = int(choice)
                    if 0 <= idx < len(moves):
                        match.apply_move(HUMAN, moves[idx])
                        break
                    print(f"Invalid: choose 0-{len(moves) - 1}")
                except MatchError as exc:
                    # MatchError は ValueError のサブクラスなので先に捕捉する
                    print(f"Move rejected: {exc}")
                except ValueError:
                    print("Enter a number.")
                except (EOFError, KeyboardInterrupt):
                    print("\nGame aborted.")
                    return
        else:
            try:
                move = best_move(match.board, Color.WHITE, depth)
                match.apply_move(ENGINE, move)
            except MatchError as exc:
                print(f"Engine move rejected: {exc}")
                break
            except ValueError:
                print("Engine has no legal moves.")
                break
            print(f"AI plays: {format_move(move)}")

        print()

    # 終局: 結果を表示
    print(format_board(match.board))
    print()
    winner = match.state.winner
    if winner == HUMAN:
        print("You win!")
    elif winner == ENGINE:
        print("AI wins!")
    else:
        print("No result.")


if __name__ == "__main__":
    main()
