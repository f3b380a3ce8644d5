import random
from math import comb

import pytest

from luckysweeper.analysis import combination_frequencies
from luckysweeper.utils import get_neighborhoods, random_combination


def test_neighborhoods_are_clipped_at_edges():
    nbrs = get_neighborhoods(3, 2)
    assert set(nbrs[(0, 0)]) == {(1, 0), (0, 1), (1, 1)}
    assert len(nbrs[(1, 0)]) == 5
    assert len(nbrs[(2, 1)]) == 3


def test_neighborhoods_are_cached():
    assert get_neighborhoods(4, 4) is get_neighborhoods(4, 4)


def test_neighborhoods_reject_empty_grid():
    with pytest.raises(ValueError):
        get_neighborhoods(0, 3)


@pytest.mark.parametrize("n,k", [(0, 0), (5, 0), (5, 5), (10, 3), (1, 1)])
def test_random_combination_selects_exactly_k(n, k):
    picked = random_combination(n, k, random.Random(n * 31 + k))
    assert len(picked) == n
    assert sum(picked) == k


@pytest.mark.parametrize("n,k", [(3, 4), (3, -1)])
def test_random_combination_rejects_bad_arguments(n, k):
    with pytest.raises(ValueError):
        random_combination(n, k)


def test_random_combination_is_uniform():
    runs = 100_000
    counts = combination_frequencies(10, 3, runs)

    assert len(counts) == comb(10, 3) == 120
    expected = runs / 120
    for subset, count in counts.items():
        assert abs(count - expected) < 0.25 * expected, subset

    chi_square = sum((c - expected) ** 2 / expected for c in counts.values())
    # 119 degrees of freedom: mean 119, standard deviation about 15.4
    assert chi_square < 220
