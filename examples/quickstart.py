"""
Quickstart example for Lucky Minesweeper.

This script plays a scripted game, moves a mine by hand and compares luck policies.
"""

import random

from luckysweeper import (
    GameConfig,
    GameStatus,
    LuckPolicy,
    Minesweeper,
    run_luck_many_tests,
)


def main():
    print("=" * 60)
    print("Lucky Minesweeper - Quickstart Example")
    print("=" * 60)

    # Example 1: Play a few clicks with great luck
    print("\n1. Five random clicks on a 13x8 board with great luck...")
    print("-" * 60)

    rng = random.Random(7)
    game = Minesweeper(
        width=13,
        height=8,
        mine_density=0.17,
        config=GameConfig(luck=LuckPolicy.GREAT),
        rng=rng,
    )

    for _ in range(5):
        hidden = [c for c in game.grid.coords() if game.cell(*c).hidden]
        if not hidden or game.status is not GameStatus.ACTIVE:
            break
        x, y = rng.choice(hidden)
        revealed = game.reveal(x, y)
        print(f"Click ({x}, {y}): {len(revealed)} cells revealed, status {game.status.value}")

    print()
    print(game.format_board(reveal_all=False))

    # Example 2: Ask the solver to move a mine directly
    print("\n2. Requesting a mine under a hidden cell...")
    print("-" * 60)

    hidden = [c for c in game.grid.coords() if game.cell(*c).hidden and not game.cell(*c).mine]
    if hidden:
        x, y = hidden[0]
        outcome = game.request_mine_state(x, y, True)
        print(f"Mine at ({x}, {y}): {outcome.value}")
        print(f"Mines on board: {game.mines_total()}")
    print(f"Solver stats: {game.solver.stats()}")

    # Example 3: Show the whole minefield
    print("\n3. Full minefield:")
    print("-" * 60)
    print(game.format_board(reveal_all=True))

    # Example 4: Compare luck policies
    print("\n4. Win rates by luck policy (20 random-click games each)...")
    print("-" * 60)

    for luck in LuckPolicy:
        results = run_luck_many_tests(
            width=13,
            height=8,
            mine_density=0.17,
            runs=20,
            luck=luck,
        )
        print(
            f"{luck.value:8s}: {results['win_rate']*100:5.1f}% win rate, "
            f"{results['avg_clicks_count']:5.1f} clicks, "
            f"{results['request_success_rate']*100:5.1f}% requests granted"
        )

    print("\n" + "=" * 60)
    print("Done! Run `python -m luckysweeper` to play in the terminal.")
    print("=" * 60)


if __name__ == "__main__":
    main()
