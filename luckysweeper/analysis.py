"""Analysis and benchmarking tools for luck policies and the placement solver."""

import itertools
import random
from collections import defaultdict
from math import comb
from typing import Dict, List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .config import COMPUTE_TIMEOUT, GameConfig, LuckPolicy
from .engine import GameStatus, Minesweeper
from .utils import random_combination


def combination_frequencies(
    n: int, k: int, runs: int, rng: Optional[random.Random] = None
) -> Dict[Tuple[int, ...], int]:
    """
    Draw many k-subsets of n positions and count how often each one appears.

    Args:
        n: Number of positions.
        k: Subset size.
        runs: Number of draws.
        rng: Random source passed to random_combination().

    Returns:
        Mapping from each subset (sorted tuple of selected indices) to its
        count. Every one of the C(n, k) subsets is present, possibly with 0.
    """
    counts: Dict[Tuple[int, ...], int] = {}
    for _ in range(runs):
        picked = random_combination(n, k, rng)
        key = tuple(i for i, sel in enumerate(picked) if sel)
        counts[key] = counts.get(key, 0) + 1

    if len(counts) < comb(n, k):
        for key in itertools.combinations(range(n), k):
            counts.setdefault(key, 0)
    return counts


def plot_combination_frequencies(counts: Dict[Tuple[int, ...], int]) -> float:
    """
    Plot observed subset frequencies against the uniform expectation.

    Args:
        counts: Output of combination_frequencies().

    Returns:
        Pearson's chi-square statistic of the counts against a uniform
        distribution over the observed subsets.
    """
    keys = sorted(counts)
    observed = np.array([counts[key] for key in keys], dtype=float)
    expected = observed.sum() / len(observed)
    chi_square = float(((observed - expected) ** 2 / expected).sum())

    plt.figure()  # type: ignore[misc]
    plt.bar(np.arange(len(keys)), observed / observed.sum())  # type: ignore[misc]
    plt.axhline(1.0 / len(keys), color="red", linestyle="--", label="uniform")  # type: ignore[misc]
    plt.xlabel("Subset index")  # type: ignore[misc]
    plt.ylabel("Observed frequency")  # type: ignore[misc]
    plt.title(f"Random combination frequencies (chi-square = {chi_square:.1f})")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    return chi_square


def run_luck_single_test(
    width: int,
    height: int,
    mine_density: float,
    luck: LuckPolicy,
    *,
    compute_timeout: float = COMPUTE_TIMEOUT,
    show_board: bool = False,
    rng: Optional[random.Random] = None,
) -> Dict[str, object]:
    """
    Play one game by clicking random hidden cells until it ends.

    Args:
        width: Board width.
        height: Board height.
        mine_density: Per-cell mine probability.
        luck: Luck policy applied to every click.
        compute_timeout: Budget in seconds for each placement request.
        show_board: If True, print the final board with mines visible.
        rng: Random source for both the board and the clicks.

    Returns:
        The placement solver's counters plus "status" (1 win, -1 loss),
        "clicks_count", "revealed_cells_count" and "mines_total".
    """
    rng = rng or random.Random()
    config = GameConfig(luck=luck, compute_timeout=compute_timeout)
    game = Minesweeper(width, height, mine_density, config=config, rng=rng)
    total_before = game.mines_total()

    clicks = 0
    while game.status is GameStatus.ACTIVE:
        candidates: List[Tuple[int, int]] = [
            (x, y) for x, y in game.grid.coords() if game.cell(x, y).hidden
        ]
        x, y = rng.choice(candidates)
        game.reveal(x, y)
        clicks += 1

    if game.mines_total() != total_before:
        raise RuntimeError("Mine count changed during the game.")

    if show_board:
        print(f"Luck policy: {luck.value}")
        print(game.format_board(reveal_all=True))
        print()
        print(f"Finished with status {game.status.value} after {clicks} clicks.")

    out: Dict[str, object] = dict(game.solver.stats())
    out["status"] = 1 if game.is_won() else -1
    out["clicks_count"] = clicks
    out["revealed_cells_count"] = game.visible_count
    out["mines_total"] = game.mines_total()
    return out


def run_luck_many_tests(
    width: int,
    height: int,
    mine_density: float,
    runs: int,
    luck: LuckPolicy,
    *,
    compute_timeout: float = COMPUTE_TIMEOUT,
    rng: Optional[random.Random] = None,
) -> Dict[str, float]:
    """
    Run many independent random-click games and return averaged metrics.

    Returns:
        Averages of every numeric per-game metric (prefixed with "avg_"), plus:
        - win_rate
        - request_success_rate: successful placements over all requests
        - request_timeout_rate: timed out placements over all requests
        - avg_solve_time: mean wall time of one MILP run
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    sums: Dict[str, float] = defaultdict(float)
    wins = 0
    total_requests = 0.0
    total_success = 0.0
    total_timeout = 0.0
    total_milp_runs = 0.0
    total_solve_time = 0.0

    for _ in range(runs):
        payload = run_luck_single_test(
            width,
            height,
            mine_density,
            luck,
            compute_timeout=compute_timeout,
            rng=rng,
        )
        if payload["status"] == 1:
            wins += 1

        for k, v in payload.items():
            if k == "status":
                continue
            if isinstance(v, (int, float)) and not isinstance(v, bool):
                sums[f"avg_{k}"] += float(v)

        total_requests += float(payload["requests_count"])  # type: ignore[arg-type]
        total_success += float(payload["success_count"])  # type: ignore[arg-type]
        total_timeout += float(payload["timeout_count"])  # type: ignore[arg-type]
        total_milp_runs += float(payload["milp_runs_count"])  # type: ignore[arg-type]
        total_solve_time += float(payload["total_solve_time"])  # type: ignore[arg-type]

    out: Dict[str, float] = {k: total / runs for k, total in sums.items()}
    out["win_rate"] = wins / runs
    out["request_success_rate"] = (
        (total_success / total_requests) if total_requests > 0 else 0.0
    )
    out["request_timeout_rate"] = (
        (total_timeout / total_requests) if total_requests > 0 else 0.0
    )
    out["avg_solve_time"] = (
        (total_solve_time / total_milp_runs) if total_milp_runs > 0 else 0.0
    )
    return out


def run_luck_policy_analysis(
    runs: int,
    width: int = 13,
    height: int = 8,
    mine_density: float = 0.17,
    *,
    policies: Sequence[LuckPolicy] = tuple(LuckPolicy),
    compute_timeout: float = COMPUTE_TIMEOUT,
) -> Dict[str, Dict[str, float]]:
    """
    Compare luck policies on the same board size and plot summaries.

    Args:
        runs: Number of independent games per policy.
        width: Board width.
        height: Board height.
        mine_density: Per-cell mine probability.
        policies: Policies to compare.
        compute_timeout: Budget in seconds for each placement request.

    Returns:
        Mapping from policy name to statistics dict returned by run_luck_many_tests().
    """
    results: Dict[str, Dict[str, float]] = {}
    for policy in policies:
        results[policy.value] = run_luck_many_tests(
            width, height, mine_density, runs, policy, compute_timeout=compute_timeout
        )

    names = list(results.keys())
    x = np.arange(len(names))

    # 1) Win rate by policy
    win_rates = [results[n]["win_rate"] for n in names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x, win_rates)  # type: ignore[misc]
    plt.xticks(x, names)  # type: ignore[misc]
    plt.ylabel("Win rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title(f"Random-click win rate by luck policy ({width}x{height})")  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    # 2) Placement outcome mix
    success = [results[n]["avg_success_count"] for n in names]
    infeasible = [results[n]["avg_infeasible_count"] for n in names]
    timeout = [results[n]["avg_timeout_count"] for n in names]

    bar_w = 0.25
    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w, success, width=bar_w, label="success")  # type: ignore[misc]
    plt.bar(x, infeasible, width=bar_w, label="infeasible")  # type: ignore[misc]
    plt.bar(x + bar_w, timeout, width=bar_w, label="timeout")  # type: ignore[misc]
    plt.xticks(x, names)  # type: ignore[misc]
    plt.ylabel("Average requests per game")  # type: ignore[misc]
    plt.title("Placement outcomes by luck policy")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    # 3) Solver cost
    solve_ms = [results[n]["avg_solve_time"] * 1000.0 for n in names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x, solve_ms)  # type: ignore[misc]
    plt.xticks(x, names)  # type: ignore[misc]
    plt.ylabel("Mean MILP time (ms)")  # type: ignore[misc]
    plt.title("Feasibility solve time by luck policy")  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    return results
