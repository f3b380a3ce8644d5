"""Terminal entry point: python -m luckysweeper"""

import argparse

from .config import (
    COMPUTE_TIMEOUT,
    GRID_HEIGHT,
    GRID_WIDTH,
    MINE_DENSITY,
    GameConfig,
    LuckPolicy,
    configure_logging,
)
from .engine import Minesweeper, play_cli


def main() -> None:
    parser = argparse.ArgumentParser(description="Minesweeper with luck policies")

    parser.add_argument(
        "--size-level",
        type=int,
        default=GameConfig.size_level,
        help="Grid size preset, 0-%d (widths %s)"
        % (len(GRID_WIDTH) - 1, ", ".join(map(str, GRID_WIDTH))),
    )
    parser.add_argument(
        "--density-level",
        type=int,
        default=GameConfig.density_level,
        help="Mine density preset, 0-%d (densities %s)"
        % (len(MINE_DENSITY) - 1, ", ".join(map(str, MINE_DENSITY))),
    )
    parser.add_argument("--width", type=int, help="Override the preset width")
    parser.add_argument("--height", type=int, help="Override the preset height")
    parser.add_argument("--density", type=float, help="Override the preset density")
    parser.add_argument(
        "--luck",
        choices=[p.value for p in LuckPolicy],
        default=LuckPolicy.NEUTRAL.value,
        help="Luck policy applied to clicks",
    )
    parser.add_argument(
        "--qmarks",
        action="store_true",
        help="Enable question marks when toggling flags",
    )
    parser.add_argument(
        "--chord-luck",
        action="store_true",
        help="Apply the luck policy to cells opened by chording",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=COMPUTE_TIMEOUT,
        help="Seconds allowed for each mine placement computation",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log placement solver activity to stderr",
    )
    args = parser.parse_args()
    if (args.width is None) != (args.height is None):
        parser.error("--width and --height must be given together")

    configure_logging(args.verbose)
    config = GameConfig(
        density_level=args.density_level,
        size_level=args.size_level,
        luck=LuckPolicy(args.luck),
        question_marks=args.qmarks,
        compute_timeout=args.timeout,
        chord_luck=args.chord_luck,
    )

    game = Minesweeper(args.width, args.height, args.density, config=config)
    play_cli(game)


if __name__ == "__main__":
    main()
