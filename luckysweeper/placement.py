"""Constraint-based mine placement: move mines around without contradicting revealed numbers."""

import logging
import random
import time
from collections import defaultdict
from enum import Enum
from typing import Callable, DefaultDict, Dict, List, Optional, Tuple, Union

import numpy as np
from scipy.optimize import Bounds, LinearConstraint, milp
from scipy.sparse import coo_matrix

from .config import COMPUTE_TIMEOUT
from .grid import Grid
from .utils import random_combination

logger = logging.getLogger(__name__)

# scipy.optimize.milp status codes
_MILP_OPTIMAL = 0
_MILP_LIMIT_REACHED = 1
_MILP_INFEASIBLE = 2


class PlacementOutcome(Enum):
    """Result of a mine placement request."""

    SUCCESS = "success"
    INFEASIBLE = "infeasible"
    TIMEOUT = "timeout"


class Deadline:
    """Wall-clock budget for one placement request."""

    def __init__(
        self, seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._clock = clock
        self.seconds = seconds
        self.expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    def expired(self) -> bool:
        return self.remaining() <= 0.0


class PlacementSolver:
    """
    Reassign mines so a chosen cell is (or is not) a mine.

    Any successful reassignment keeps every revealed number correct, keeps the
    total mine count and never touches a revealed cell.

    Hidden cells are split in two groups:
    - shallowly-hidden: touching a revealed number; each becomes a 0/1
      variable of a small integer feasibility problem whose rows are the
      revealed numbers.
    - deeply-hidden: touching no revealed number; whatever mines the shallow
      assignment leaves over are scattered over them uniformly at random.
    """

    def __init__(
        self,
        grid: Grid,
        compute_timeout: float = COMPUTE_TIMEOUT,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize a placement solver bound to a specific grid.

        Args:
            grid: The minefield to edit in place.
            compute_timeout: Default wall-clock budget in seconds for one request.
            rng: Random source for the deeply-hidden completion.
        """
        self.grid = grid
        self.compute_timeout = compute_timeout
        self.rng = rng

        # Metrics / counters (for analysis)
        self.requests_count: int = 0
        self.fast_path_count: int = 0
        self.milp_runs_count: int = 0
        self.outcome_counts: DefaultDict[str, int] = defaultdict(int)
        self.solve_times: List[float] = []

    def stats(self) -> Dict[str, Union[int, float]]:
        """Return the counters accumulated since this solver was created."""
        out: Dict[str, Union[int, float]] = {
            "requests_count": self.requests_count,
            "fast_path_count": self.fast_path_count,
            "milp_runs_count": self.milp_runs_count,
            "total_solve_time": float(sum(self.solve_times)),
            "max_solve_time": max(self.solve_times, default=0.0),
        }
        for outcome in PlacementOutcome:
            out[f"{outcome.value}_count"] = self.outcome_counts[outcome.value]
        return out

    def _finish(self, outcome: PlacementOutcome) -> PlacementOutcome:
        self.outcome_counts[outcome.value] += 1
        return outcome

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def request(
        self,
        x: int,
        y: int,
        want_mine: bool,
        timeout: Optional[float] = None,
        deadline: Optional[Deadline] = None,
    ) -> PlacementOutcome:
        """
        Try to make (x, y) hold a mine (want_mine=True) or not (want_mine=False).

        Args:
            x: Target x-coordinate.
            y: Target y-coordinate.
            want_mine: Requested mine state for the target.
            timeout: Budget in seconds for this call; defaults to compute_timeout.
            deadline: Explicit deadline, overriding timeout.

        Returns:
            SUCCESS if the grid now satisfies the request (possibly without any
            change), INFEASIBLE if no consistent minefield exists, TIMEOUT if
            the solver ran out of time. The grid is untouched unless SUCCESS.

        Raises:
            ValueError: If coordinates are outside the board, or the target
                is a revealed cell holding a mine.
        """
        grid = self.grid
        target = grid.cell(x, y)
        if target.visible and target.mine:
            raise ValueError(f"Revealed cell ({x}, {y}) holds a mine.")
        self.requests_count += 1

        if target.mine == want_mine:
            return self._finish(PlacementOutcome.SUCCESS)
        if target.visible:
            # Never materialize a mine under a revealed cell.
            return self._finish(PlacementOutcome.INFEASIBLE)

        total = grid.mines_total()
        if want_mine and total == 0:
            logger.info("Placement aborted: there are no mines to move.")
            return self._finish(PlacementOutcome.INFEASIBLE)
        if not want_mine and total == grid.area:
            logger.info("Placement aborted: the grid is full of mines.")
            return self._finish(PlacementOutcome.INFEASIBLE)

        numbers, shallow, deep = self._classify()
        target_is_deep = (x, y) in deep
        if target_is_deep:
            # Resolved directly at the end, not through the random pool.
            deep.remove((x, y))
            if want_mine:
                total -= 1

        deep_mines = sum(1 for dx, dy in deep if grid.cell(dx, dy).mine)
        shallow_mines = sum(1 for sx, sy in shallow if grid.cell(sx, sy).mine)

        assignment: Optional[List[bool]] = None
        if not numbers:
            fast_path = True
        elif target_is_deep and want_mine and deep_mines > 0:
            fast_path = True
        elif target_is_deep and not want_mine and deep_mines < len(deep):
            fast_path = True
        else:
            fast_path = False

        if fast_path:
            self.fast_path_count += 1
            shallow_total = shallow_mines
        else:
            deadline = deadline or Deadline(
                self.compute_timeout if timeout is None else timeout
            )
            outcome, assignment = self._solve(
                numbers,
                shallow,
                len(deep),
                total,
                None if target_is_deep else ((x, y), want_mine),
                deadline,
            )
            if assignment is None:
                return self._finish(outcome)
            shallow_total = sum(assignment)

        leftover = total - shallow_total
        if not 0 <= leftover <= len(deep):
            logger.info(
                "Placement aborted: %d mines do not fit in %d deeply-hidden cells.",
                leftover,
                len(deep),
            )
            return self._finish(PlacementOutcome.INFEASIBLE)
        deep_assignment = random_combination(len(deep), leftover, self.rng)

        # Commit: nothing above this point has written to the grid.
        if assignment is not None:
            for (sx, sy), mine in zip(shallow, assignment):
                grid.cell(sx, sy).mine = mine
        for (dx, dy), mine in zip(deep, deep_assignment):
            grid.cell(dx, dy).mine = mine
        if target_is_deep:
            target.mine = want_mine
        grid.recompute_all_adjacency()

        logger.debug(
            "Moved mines for (%d, %d) want_mine=%s: m=%d n=%d dh=%d T=%d fast_path=%s",
            x,
            y,
            want_mine,
            len(numbers),
            len(shallow),
            len(deep),
            total,
            fast_path,
        )
        return self._finish(PlacementOutcome.SUCCESS)

    # -------------------------------------------------------------------------
    # Problem construction
    # -------------------------------------------------------------------------

    def _classify(
        self,
    ) -> Tuple[List[Tuple[int, int]], List[Tuple[int, int]], List[Tuple[int, int]]]:
        """Split the grid into revealed numbers, shallowly- and deeply-hidden cells."""
        grid = self.grid
        numbers: List[Tuple[int, int]] = []
        shallow: List[Tuple[int, int]] = []
        deep: List[Tuple[int, int]] = []

        for x, y in grid.coords():
            c = grid.cell(x, y)
            if c.visible:
                if c.adjacent_mine_count != 0:
                    numbers.append((x, y))
            elif grid.touches_number(x, y):
                shallow.append((x, y))
            else:
                deep.append((x, y))

        return numbers, shallow, deep

    def _solve(
        self,
        numbers: List[Tuple[int, int]],
        shallow: List[Tuple[int, int]],
        deep_count: int,
        total: int,
        pin: Optional[Tuple[Tuple[int, int], bool]],
        deadline: Deadline,
    ) -> Tuple[PlacementOutcome, Optional[List[bool]]]:
        """
        Find any 0/1 assignment of the shallowly-hidden cells.

        Constraints:
            - each revealed number equals the mines among its hidden neighbors;
            - total - deep_count <= shallow mines <= total;
            - the pinned cell, if any, takes the requested value.

        Returns:
            (SUCCESS, assignment) on a feasible point, else (outcome, None).
        """
        if deadline.expired():
            logger.info("Computation timeout exceeded before solving.")
            return PlacementOutcome.TIMEOUT, None

        grid = self.grid
        n = len(shallow)
        column: Dict[Tuple[int, int], int] = {coord: j for j, coord in enumerate(shallow)}

        rows: List[int] = []
        cols: List[int] = []
        lower: List[float] = []
        upper: List[float] = []
        for i, (x, y) in enumerate(numbers):
            for nx, ny in grid.neighbors(x, y):
                if grid.cell(nx, ny).hidden:
                    rows.append(i)
                    cols.append(column[(nx, ny)])
            digit = float(grid.cell(x, y).adjacent_mine_count)
            lower.append(digit)
            upper.append(digit)

        total_row = len(numbers)
        rows.extend([total_row] * n)
        cols.extend(range(n))
        lower.append(float(total - deep_count))
        upper.append(float(total))

        matrix = coo_matrix(
            (np.ones(len(rows)), (rows, cols)), shape=(total_row + 1, n)
        ).tocsr()

        lb = np.zeros(n)
        ub = np.ones(n)
        if pin is not None:
            coord, want_mine = pin
            lb[column[coord]] = ub[column[coord]] = 1.0 if want_mine else 0.0

        self.milp_runs_count += 1
        started = time.perf_counter()
        result = milp(
            c=np.zeros(n),
            integrality=np.ones(n),
            bounds=Bounds(lb, ub),
            constraints=LinearConstraint(matrix, np.array(lower), np.array(upper)),
            options={"time_limit": deadline.remaining(), "disp": False},
        )
        self.solve_times.append(time.perf_counter() - started)

        if result.x is not None and result.status in (
            _MILP_OPTIMAL,
            _MILP_LIMIT_REACHED,
        ):
            # Zero objective: the first incumbent is as good as any.
            return PlacementOutcome.SUCCESS, [bool(round(v)) for v in result.x]

        if result.status == _MILP_LIMIT_REACHED:
            logger.info(
                "Computation timeout exceeded (m=%d, n=%d).", len(numbers), n
            )
            return PlacementOutcome.TIMEOUT, None
        if result.status == _MILP_INFEASIBLE:
            logger.info(
                "No compatible minefield configuration exists (m=%d, n=%d).",
                len(numbers),
                n,
            )
            return PlacementOutcome.INFEASIBLE, None

        logger.warning(
            "Failed to find a compatible minefield configuration: %s", result.message
        )
        return PlacementOutcome.INFEASIBLE, None
