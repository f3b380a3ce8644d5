"""
Game configuration: preset tables, luck policies and logging setup.

The application layer owns these values and passes them into the engine as
plain parameters; nothing here is read implicitly by the grid or the solver.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

# Wall-clock budget (seconds) for one mine placement request.
COMPUTE_TIMEOUT = 1.0

MINE_DENSITY: Tuple[float, ...] = (0.0, 0.05, 0.10, 0.12, 0.14, 0.17, 0.20, 0.25, 0.50, 1.0)
GRID_WIDTH: Tuple[int, ...] = (5, 8, 13, 21, 34, 55, 89, 144, 233, 377)
GRID_HEIGHT: Tuple[int, ...] = (3, 5, 8, 13, 21, 34, 55, 89, 144, 233)

DEFAULT_DENSITY_LEVEL = 5
DEFAULT_SIZE_LEVEL = 4

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class LuckPolicy(Enum):
    """How the engine bends the minefield under a click."""

    NEUTRAL = "neutral"
    GREAT = "great"
    GOOD = "good"
    BAD = "bad"

    def next(self) -> "LuckPolicy":
        """Cycle neutral -> great -> good -> bad -> neutral."""
        members = list(LuckPolicy)
        return members[(members.index(self) + 1) % len(members)]


def _clamp_level(level: int, table: Tuple) -> int:
    return max(0, min(level, len(table) - 1))


@dataclass
class GameConfig:
    """
    Settings for a game session.

    Attributes:
        density_level: Index into MINE_DENSITY.
        size_level: Index into GRID_WIDTH / GRID_HEIGHT.
        luck: Luck policy applied to clicks.
        question_marks: Whether right-click cycles through a question mark.
        compute_timeout: Budget in seconds for each placement request.
        first_click_safe: Treat the first click as GREAT luck unless the policy is BAD.
        chord_luck: Apply the luck policy to cells revealed by chording too.
    """

    density_level: int = DEFAULT_DENSITY_LEVEL
    size_level: int = DEFAULT_SIZE_LEVEL
    luck: LuckPolicy = LuckPolicy.NEUTRAL
    question_marks: bool = False
    compute_timeout: float = COMPUTE_TIMEOUT
    first_click_safe: bool = True
    chord_luck: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.density_level < len(MINE_DENSITY):
            raise ValueError(
                f"density_level must be in [0, {len(MINE_DENSITY) - 1}]."
            )
        if not 0 <= self.size_level < len(GRID_WIDTH):
            raise ValueError(f"size_level must be in [0, {len(GRID_WIDTH) - 1}].")
        if self.compute_timeout < 0:
            raise ValueError("compute_timeout must be non-negative.")

    @property
    def width(self) -> int:
        return GRID_WIDTH[self.size_level]

    @property
    def height(self) -> int:
        return GRID_HEIGHT[self.size_level]

    @property
    def mine_density(self) -> float:
        return MINE_DENSITY[self.density_level]

    def step_density(self, delta: int) -> None:
        self.density_level = _clamp_level(self.density_level + delta, MINE_DENSITY)

    def step_size(self, delta: int) -> None:
        self.size_level = _clamp_level(self.size_level + delta, GRID_WIDTH)


def configure_logging(verbose: bool = False) -> None:
    """Send library logs to stderr. Only entry points call this."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )
