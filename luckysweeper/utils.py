"""Utility functions shared by the grid, the placement solver and the analysis tools."""

import random
from typing import Dict, List, Optional, Tuple

# Module-level cache: (width, height) -> {(x,y): ((nx,ny), ...), ...}
_NEIGHBORHOODS_CACHE: Dict[
    Tuple[int, int],
    Dict[Tuple[int, int], Tuple[Tuple[int, int], ...]]
] = {}

# OS-seeded generator used when the caller does not inject one.
_SYSTEM_RNG = random.Random()


def get_neighborhoods(
    width: int, height: int
) -> Dict[Tuple[int, int], Tuple[Tuple[int, int], ...]]:
    """
    Precompute and cache 8-connected neighbor coordinates for every cell in a grid.

    Args:
        width: Grid width (number of columns). Must be positive.
        height: Grid height (number of rows). Must be positive.

    Returns:
        Mapping from each cell (x, y) to a tuple of valid neighboring
        coordinates (nx, ny) under 8-connectivity.

    Raises:
        ValueError: If width or height is non-positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive.")

    key = (width, height)
    cached = _NEIGHBORHOODS_CACHE.get(key)
    if cached is not None:
        return cached

    neighborhoods: Dict[Tuple[int, int], Tuple[Tuple[int, int], ...]] = {}
    for y in range(height):
        for x in range(width):
            nbrs: List[Tuple[int, int]] = []
            for dy in (-1, 0, 1):
                for dx in (-1, 0, 1):
                    if dx == 0 and dy == 0:
                        continue
                    nx, ny = x + dx, y + dy
                    if 0 <= nx < width and 0 <= ny < height:
                        nbrs.append((nx, ny))
            neighborhoods[(x, y)] = tuple(nbrs)

    _NEIGHBORHOODS_CACHE[key] = neighborhoods
    return neighborhoods


def random_combination(
    n: int, k: int, rng: Optional[random.Random] = None
) -> List[bool]:
    """
    Pick a k-subset of n positions uniformly from all C(n, k) possibilities.

    Implements Robert Floyd's selection algorithm, which touches only k
    positions instead of shuffling all n.

    Args:
        n: Number of positions.
        k: Number of positions to select; 0 <= k <= n.
        rng: Random source. Defaults to a module-level OS-seeded generator.

    Returns:
        A list of n booleans with exactly k True entries.

    Raises:
        ValueError: If k is negative or greater than n.
    """
    if k < 0:
        raise ValueError("k must be non-negative.")
    if n < k:
        raise ValueError("n must be at least k.")

    rng = rng or _SYSTEM_RNG
    combination = [False] * n
    for j in range(n - k + 1, n + 1):
        r = rng.randint(1, j)
        if combination[r - 1]:
            combination[j - 1] = True
        else:
            combination[r - 1] = True
    return combination
