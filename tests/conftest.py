from typing import Callable, Iterable, Tuple

import pytest

from luckysweeper.grid import Grid

Coord = Tuple[int, int]


def build_grid(
    width: int,
    height: int,
    mines: Iterable[Coord] = (),
    visible: Iterable[Coord] = (),
    flags: Iterable[Coord] = (),
) -> Grid:
    """Build a grid with explicit mines, shown cells (no cascade) and flags."""
    grid = Grid(width, height)
    for x, y in mines:
        grid.spawn_mine(x, y)
    for x, y in visible:
        grid.cell(x, y).visible = True
        grid.visible_count += 1
    for x, y in flags:
        grid.cell(x, y).flag = True
    return grid


def assert_adjacency_consistent(grid: Grid) -> None:
    for x, y in grid.coords():
        assert grid.cell(x, y).adjacent_mine_count == grid.count_adjacent_mines(x, y), (x, y)


@pytest.fixture
def make_grid() -> Callable[..., Grid]:
    return build_grid


@pytest.fixture
def check_adjacency() -> Callable[[Grid], None]:
    return assert_adjacency_consistent
