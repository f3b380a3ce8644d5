"""Minefield storage, incremental adjacency bookkeeping and flood reveal."""

import random
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Iterator, List, Optional, Tuple

from .utils import get_neighborhoods


@dataclass
class Cell:
    """State of a single grid position."""

    mine: bool = False
    exploded: bool = False
    flag: bool = False
    qmark: bool = False
    visible: bool = False
    mistake: bool = False
    adjacent_mine_count: int = 0

    @property
    def hidden(self) -> bool:
        return not self.visible

    @property
    def is_number(self) -> bool:
        """True for a revealed cell showing a nonzero digit."""
        return self.visible and self.adjacent_mine_count != 0


class Grid:
    """
    Fixed-size rectangular minefield stored row-major.

    Keeps every cell's adjacent_mine_count equal to the true number of mines
    in its 8-neighborhood, and counts revealed cells for win detection.
    """

    def __init__(self, width: int, height: int) -> None:
        """
        Allocate an empty, fully hidden grid.

        Args:
            width: Grid width (number of columns), must be > 0.
            height: Grid height (number of rows), must be > 0.

        Raises:
            ValueError: If dimensions are invalid.
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive.")

        self.width: int = width
        self.height: int = height
        self.cells: List[Cell] = [Cell() for _ in range(width * height)]
        self.visible_count: int = 0

        self._neighborhoods: Dict[
            Tuple[int, int], Tuple[Tuple[int, int], ...]
        ] = get_neighborhoods(width, height)

    @classmethod
    def random(
        cls,
        width: int,
        height: int,
        mine_density: float,
        rng: Optional[random.Random] = None,
    ) -> "Grid":
        """
        Build a grid whose cells are mined by independent Bernoulli trials.

        Args:
            width: Grid width.
            height: Grid height.
            mine_density: Probability in [0, 1] that any given cell holds a mine.
            rng: Random source; a fresh OS-seeded generator when omitted.

        Raises:
            ValueError: If the density is outside [0, 1].
        """
        if not 0.0 <= mine_density <= 1.0:
            raise ValueError("mine_density must be between 0 and 1.")

        rng = rng or random.Random()
        grid = cls(width, height)
        for y in range(height):
            for x in range(width):
                if rng.random() < mine_density:
                    grid.spawn_mine(x, y)
        return grid

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    @property
    def area(self) -> int:
        return self.width * self.height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> Cell:
        """
        Return the cell at (x, y).

        Raises:
            ValueError: If coordinates are out of bounds.
        """
        if not self.in_bounds(x, y):
            raise ValueError("Cell coordinates are outside the board.")
        return self.cells[self.width * y + x]

    def neighbors(self, x: int, y: int) -> Tuple[Tuple[int, int], ...]:
        """Return precomputed neighbor coordinates for a cell."""
        return self._neighborhoods[(x, y)]

    def coords(self) -> Iterator[Tuple[int, int]]:
        """Yield every (x, y) in row-major order."""
        for y in range(self.height):
            for x in range(self.width):
                yield x, y

    def mines_total(self) -> int:
        return sum(1 for c in self.cells if c.mine)

    def count_adjacent_mines(self, x: int, y: int) -> int:
        return sum(1 for nx, ny in self.neighbors(x, y) if self.cell(nx, ny).mine)

    def count_adjacent_visible(self, x: int, y: int) -> int:
        return sum(1 for nx, ny in self.neighbors(x, y) if self.cell(nx, ny).visible)

    def touches_number(self, x: int, y: int) -> bool:
        """True if some neighbor is a revealed nonzero digit."""
        return any(self.cell(nx, ny).is_number for nx, ny in self.neighbors(x, y))

    # -------------------------------------------------------------------------
    # Adjacency maintenance
    # -------------------------------------------------------------------------

    def spawn_mine(self, x: int, y: int) -> bool:
        """
        Place a mine and bump the neighbors' counts.

        Returns:
            False if (x, y) already held a mine, True otherwise.
        """
        target = self.cell(x, y)
        if target.mine:
            return False

        target.mine = True
        for nx, ny in self.neighbors(x, y):
            self.cell(nx, ny).adjacent_mine_count += 1
        return True

    def remove_mine(self, x: int, y: int) -> bool:
        """
        Remove a mine, lower the neighbors' counts and re-cascade visible ones.

        A visible neighbor may drop to zero, in which case its own hidden
        neighbors have to be revealed.

        Returns:
            False if (x, y) held no mine, True otherwise.
        """
        target = self.cell(x, y)
        if not target.mine:
            return False

        target.mine = False
        for nx, ny in self.neighbors(x, y):
            self.cell(nx, ny).adjacent_mine_count -= 1
        for nx, ny in self.neighbors(x, y):
            if self.cell(nx, ny).visible:
                self.reveal(nx, ny)
        return True

    def recompute_all_adjacency(self) -> None:
        """Rescan the whole grid after a bulk mine reassignment."""
        for x, y in self.coords():
            self.cell(x, y).adjacent_mine_count = self.count_adjacent_mines(x, y)

    # -------------------------------------------------------------------------
    # Flood reveal
    # -------------------------------------------------------------------------

    def reveal(self, x: int, y: int) -> List[Tuple[int, int]]:
        """
        Reveal (x, y) and cascade through connected zero-count cells.

        Visiting order is breadth-first from an explicit worklist so the
        cascade depth is not limited by the interpreter's call stack.

        Args:
            x: X-coordinate of the starting cell.
            y: Y-coordinate of the starting cell.

        Returns:
            Newly revealed cells as (x, y), in reveal order.
        """
        frontier: Deque[Tuple[int, int]] = deque([(x, y)])
        queued = {(x, y)}
        revealed_cells: List[Tuple[int, int]] = []

        while frontier:
            cx, cy = frontier.popleft()
            current = self.cell(cx, cy)
            if not current.visible:
                current.visible = True
                self.visible_count += 1
                revealed_cells.append((cx, cy))
            current.flag = False
            current.qmark = False

            if current.adjacent_mine_count != 0:
                continue
            for nx, ny in self.neighbors(cx, cy):
                if (nx, ny) in queued or self.cell(nx, ny).visible:
                    continue
                queued.add((nx, ny))
                frontier.append((nx, ny))

        return revealed_cells

    def all_safe_revealed(self) -> bool:
        return self.visible_count + self.mines_total() == self.area
