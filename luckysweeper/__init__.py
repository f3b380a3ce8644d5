"""
Lucky Minesweeper

A Minesweeper engine that can bend luck without cheating on the numbers:
- Grid: incremental adjacency counts and iterative flood reveal
- Placement solver: integer feasibility over the revealed numbers, with a
  wall-clock deadline, plus uniform random completion of the hidden area
- Luck policies: safe first click, lucky clicks, or adversarial bad luck
"""

from .config import GameConfig, LuckPolicy
from .engine import GameStatus, Minesweeper, play_cli
from .grid import Cell, Grid
from .placement import Deadline, PlacementOutcome, PlacementSolver
from .utils import random_combination
from .analysis import (
    combination_frequencies,
    plot_combination_frequencies,
    run_luck_single_test,
    run_luck_many_tests,
    run_luck_policy_analysis,
)

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "Cell",
    "Grid",
    "Minesweeper",
    "PlacementSolver",
    # Results and settings
    "Deadline",
    "GameConfig",
    "GameStatus",
    "LuckPolicy",
    "PlacementOutcome",
    # Sampling
    "random_combination",
    # CLI
    "play_cli",
    # Analysis functions
    "combination_frequencies",
    "plot_combination_frequencies",
    "run_luck_single_test",
    "run_luck_many_tests",
    "run_luck_policy_analysis",
]
