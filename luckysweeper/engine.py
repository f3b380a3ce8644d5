"""Minesweeper game session with luck policies backed by constrained mine placement."""

import logging
import random
from enum import Enum
from typing import List, Optional, Tuple

from .config import GameConfig, LuckPolicy
from .grid import Cell, Grid
from .placement import PlacementOutcome, PlacementSolver

logger = logging.getLogger(__name__)


class GameStatus(Enum):
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"


class Minesweeper:
    """
    One game session: owns the grid, applies player actions and luck policies.

    All calls are synchronous; each one has fully updated the grid by the time
    it returns, so the caller can render right after.
    """

    def __init__(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        mine_density: Optional[float] = None,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize a game session and start the first game.

        Args:
            width: Board width; defaults to the config's preset.
            height: Board height; defaults to the config's preset.
            mine_density: Per-cell mine probability; defaults to the config's preset.
            config: Session settings. A default GameConfig when omitted.
            rng: Random source for mine sprinkling and placement completion.

        Raises:
            ValueError: If dimensions or density are invalid.
        """
        self.config: GameConfig = config or GameConfig()
        self.rng: random.Random = rng or random.Random()
        self.new_game(width, height, mine_density)

    def new_game(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        mine_density: Optional[float] = None,
    ) -> None:
        """
        Replace the grid with a fresh one mined by independent Bernoulli trials.

        Arguments left as None fall back to the config's presets.

        Raises:
            ValueError: If dimensions or density are invalid.
        """
        self.mine_density: float = (
            self.config.mine_density if mine_density is None else mine_density
        )
        self.grid: Grid = Grid.random(
            self.config.width if width is None else width,
            self.config.height if height is None else height,
            self.mine_density,
            rng=self.rng,
        )
        self.solver: PlacementSolver = PlacementSolver(
            self.grid, compute_timeout=self.config.compute_timeout, rng=self.rng
        )
        self.status: GameStatus = GameStatus.ACTIVE
        self.first_move: bool = True

    @classmethod
    def from_grid(
        cls,
        grid: Grid,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> "Minesweeper":
        """Start a session on an existing grid (scripted boards, tests)."""
        game = cls(grid.width, grid.height, 0.0, config=config, rng=rng)
        game.grid = grid
        game.mine_density = grid.mines_total() / grid.area
        game.solver = PlacementSolver(
            grid, compute_timeout=game.config.compute_timeout, rng=game.rng
        )
        game.first_move = grid.visible_count == 0
        return game

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    @property
    def visible_count(self) -> int:
        return self.grid.visible_count

    def cell(self, x: int, y: int) -> Cell:
        return self.grid.cell(x, y)

    def mines_total(self) -> int:
        return self.grid.mines_total()

    def mines_remaining(self) -> int:
        """Mines minus flags, not counting flags already exposed as mistakes."""
        flags = sum(1 for c in self.grid.cells if c.flag and not c.mistake)
        return self.mines_total() - flags

    def mines_displayed(self) -> int:
        if self.status is GameStatus.ACTIVE:
            return self.mines_remaining()
        return self.mines_total()

    def is_won(self) -> bool:
        return self.status is GameStatus.WON

    def is_lost(self) -> bool:
        return self.status is GameStatus.LOST

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def request_mine_state(
        self, x: int, y: int, want_mine: bool, timeout: Optional[float] = None
    ) -> PlacementOutcome:
        """Ask the placement solver to make (x, y) a mine or a safe cell."""
        return self.solver.request(x, y, want_mine, timeout=timeout)

    def reveal(self, x: int, y: int) -> List[Tuple[int, int]]:
        """
        Click a cell, letting the luck policy move mines first.

        Args:
            x: X-coordinate of the clicked cell.
            y: Y-coordinate of the clicked cell.

        Returns:
            Newly revealed cells as (x, y). Empty when the click was ignored
            or hit a mine.

        Raises:
            ValueError: If coordinates are out of bounds.
        """
        target = self.grid.cell(x, y)
        if self.status is not GameStatus.ACTIVE:
            return []
        if target.visible or target.flag or target.qmark:
            return []

        revealed = self._open(x, y, apply_luck=True)
        self.first_move = False
        self._check_win()
        return revealed

    def chord(self, x: int, y: int) -> List[Tuple[int, int]]:
        """
        Reveal all unflagged neighbors of a number whose flag count matches it.

        A question-marked neighbor blocks the chord entirely.

        Returns:
            Newly revealed cells as (x, y).

        Raises:
            ValueError: If coordinates are out of bounds.
        """
        center = self.grid.cell(x, y)
        if self.status is not GameStatus.ACTIVE or not center.visible:
            return []

        flag_count = 0
        for nx, ny in self.grid.neighbors(x, y):
            neighbor = self.grid.cell(nx, ny)
            if neighbor.qmark:
                return []
            if neighbor.hidden and neighbor.flag:
                flag_count += 1

        if flag_count != center.adjacent_mine_count:
            return []

        revealed: List[Tuple[int, int]] = []
        for nx, ny in self.grid.neighbors(x, y):
            neighbor = self.grid.cell(nx, ny)
            if neighbor.visible or neighbor.flag or neighbor.qmark:
                continue
            revealed.extend(self._open(nx, ny, apply_luck=self.config.chord_luck))

        self._check_win()
        return revealed

    def toggle_flag(self, x: int, y: int) -> None:
        """Cycle a hidden cell through flag -> question mark (if enabled) -> nothing."""
        c = self.grid.cell(x, y)
        if self.status is not GameStatus.ACTIVE or c.visible:
            return

        if c.flag:
            c.flag = False
            if self.config.question_marks:
                c.qmark = True
        elif c.qmark:
            c.qmark = False
        else:
            c.flag = True

    def toggle_question_mark(self, x: int, y: int) -> None:
        c = self.grid.cell(x, y)
        if self.status is not GameStatus.ACTIVE or c.visible:
            return
        if not self.config.question_marks:
            return

        c.qmark = not c.qmark
        if c.qmark:
            c.flag = False

    def set_question_marks_enabled(self, enabled: bool) -> None:
        """Turn question marks on or off; turning them off clears all of them."""
        self.config.question_marks = enabled
        if not enabled:
            for c in self.grid.cells:
                c.qmark = False

    def claim_win(self) -> GameStatus:
        """
        End an active game on the player's request.

        With every mine accounted for by a flag, the game is won if the flags
        sit exactly on the mines. Otherwise the player resigns.
        """
        if self.status is not GameStatus.ACTIVE:
            return self.status

        if self.mines_remaining() == 0:
            won = all(c.flag == c.mine for c in self.grid.cells)
            self._end_game(won)
        else:
            self._end_game(False)
        return self.status

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _luck_forces(self, x: int, y: int) -> Tuple[bool, bool]:
        """Return (force_mine, force_no_mine) for a click at (x, y)."""
        luck = self.config.luck
        if (
            self.first_move
            and self.config.first_click_safe
            and luck is not LuckPolicy.BAD
        ):
            luck = LuckPolicy.GREAT

        force_mine = luck is LuckPolicy.BAD
        # "Good" luck only helps next to already revealed cells.
        force_no_mine = luck is LuckPolicy.GREAT or (
            luck is LuckPolicy.GOOD and self.grid.count_adjacent_visible(x, y) > 0
        )
        return force_mine, force_no_mine

    def _open(self, x: int, y: int, apply_luck: bool) -> List[Tuple[int, int]]:
        """Resolve one opened cell: explode or flood reveal."""
        target = self.grid.cell(x, y)
        if apply_luck and self.status is GameStatus.ACTIVE:
            force_mine, force_no_mine = self._luck_forces(x, y)
        else:
            force_mine, force_no_mine = False, False

        if target.mine:
            if (
                force_no_mine
                and self.request_mine_state(x, y, False) is PlacementOutcome.SUCCESS
            ):
                return self.grid.reveal(x, y)
            self._explode(x, y)
            return []

        if (
            force_mine
            and self.request_mine_state(x, y, True) is PlacementOutcome.SUCCESS
        ):
            self._explode(x, y)
            return []
        return self.grid.reveal(x, y)

    def _explode(self, x: int, y: int) -> None:
        self.grid.cell(x, y).exploded = True
        logger.debug("Mine hit at (%d, %d).", x, y)
        self._end_game(False)

    def _check_win(self) -> None:
        if self.status is GameStatus.ACTIVE and self.grid.all_safe_revealed():
            self._end_game(True)

    def _end_game(self, won: bool) -> None:
        self.status = GameStatus.WON if won else GameStatus.LOST
        for c in self.grid.cells:
            if c.flag and not c.mine:
                c.mistake = True

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"

    def _c(self, s: str) -> str:
        """Wrap string in coordinate color."""
        return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}"

    def _m(self, s: str) -> str:
        """Wrap string in mine color (red)."""
        return f"{self._ANSI_MINE}{s}{self._ANSI_RESET}"

    def cell_symbol(self, x: int, y: int, reveal_all: bool = False) -> str:
        """
        Single-character view of a cell.

        '.' hidden, 'F' flag, '?' question mark, '0'-'8' revealed number,
        'M' mine (shown after the game or with reveal_all), '*' exploded mine,
        'X' wrong flag.
        """
        c = self.grid.cell(x, y)
        show_mines = reveal_all or self.status is not GameStatus.ACTIVE
        if c.visible:
            return str(c.adjacent_mine_count)
        if c.exploded:
            return "*"
        if c.mistake:
            return "X"
        if c.flag:
            return "F"
        if show_mines and c.mine:
            return "M"
        if c.qmark:
            return "?"
        if reveal_all:
            return str(c.adjacent_mine_count)
        return "."

    def format_board(self, reveal_all: bool = False, color: bool = True) -> str:
        """
        Render the board as a multi-line string for terminal display.

        Args:
            reveal_all: If True, show mines and all underlying values.
            color: If False, emit plain text without ANSI escapes.

        Returns:
            A formatted multi-line string with coordinate labels and the board grid.
        """
        w, h = self.width, self.height
        c = self._c if color else str
        m = self._m if color else str

        def cell_str(x: int, y: int) -> str:
            s = self.cell_symbol(x, y, reveal_all=reveal_all)
            return m(s) if s in ("M", "*", "X") else s

        # Header: x coordinates
        header_cells = " ".join(f"{x:2d}" for x in range(w))
        out = [c("   ") + c(header_cells)]

        # Separator line
        out.append(c("   " + "-" * (3 * w - 1)))

        # Rows with y coordinate at left
        for y in range(h):
            row_cells = " ".join(f" {cell_str(x, y)}" for x in range(w))
            out.append(c(f"{y:2d} ") + c("|") + row_cells)

        return "\n".join(out)

    def print_board(self) -> None:
        """Print the current visible board state to stdout."""
        print(self.format_board(reveal_all=False))


_CLI_HELP = """Commands (coordinates are 0-based):
  x y      reveal a cell
  f x y    toggle flag (and question mark, if enabled)
  c x y    chord around a revealed number
  l        cycle luck policy
  w        claim the win (or resign)
  n        new game
  q        quit"""


def play_cli(game: Minesweeper) -> None:
    """
    Run a simple terminal UI for playing Minesweeper.

    Args:
        game: A Minesweeper instance to play against.
    """
    print("Minesweeper CLI. Type 'h' for help, 'q' to quit.\n")
    print(game.format_board(reveal_all=False))

    while True:
        print(
            f"\nMines: {game.mines_displayed()}  Luck: {game.config.luck.value}"
            f"  Status: {game.status.value}"
        )
        s = input("Move: ").strip().lower()
        if s in {"q", "quit", "exit"}:
            print("Quit.")
            return
        if s in {"h", "help", "?"}:
            print(_CLI_HELP)
            continue
        if s == "l":
            game.config.luck = game.config.luck.next()
            continue
        if s == "n":
            game.new_game(game.width, game.height, game.mine_density)
            print(game.format_board(reveal_all=False))
            continue
        if s == "w":
            game.claim_win()
            print(game.format_board(reveal_all=False))
            continue

        parts = s.replace(",", " ").split()
        action = "r"
        if parts and parts[0] in {"f", "c"}:
            action = parts.pop(0)
        if len(parts) != 2:
            print("Invalid input. Example: 3 5")
            continue

        try:
            x = int(parts[0])
            y = int(parts[1])
        except ValueError:
            print("Invalid input. Coordinates must be integers.")
            continue
        if not game.grid.in_bounds(x, y):
            print("Invalid input. Cell is outside the board.")
            continue

        if action == "f":
            game.toggle_flag(x, y)
        elif action == "c":
            game.chord(x, y)
        else:
            game.reveal(x, y)

        print()
        print(game.format_board(reveal_all=False))

        if game.is_lost():
            print("\nYou hit a mine. You lost. Type 'n' for a new game.")
        elif game.is_won():
            print("\nYou revealed all safe cells. You won! Type 'n' for a new game.")
