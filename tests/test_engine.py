import copy
import random

import pytest

from luckysweeper import placement
from luckysweeper.config import GameConfig, LuckPolicy
from luckysweeper.engine import GameStatus, Minesweeper
from luckysweeper.placement import PlacementOutcome


def session(grid, **config):
    return Minesweeper.from_grid(grid, config=GameConfig(**config), rng=random.Random(5))


def test_new_game_uses_config_presets():
    game = Minesweeper(config=GameConfig(size_level=0, density_level=0))
    assert (game.width, game.height) == (5, 3)
    assert game.mines_total() == 0
    assert game.status is GameStatus.ACTIVE
    assert game.visible_count == 0


def test_new_game_with_explicit_parameters():
    game = Minesweeper(7, 4, 1.0)
    assert (game.width, game.height) == (7, 4)
    assert game.mines_total() == 28

    game.new_game(3, 3, 0.0)
    assert game.mines_total() == 0
    assert game.first_move


def test_first_click_is_made_safe(make_grid, check_adjacency):
    game = session(make_grid(5, 5, mines=[(2, 2)]))
    assert game.first_move

    game.reveal(2, 2)

    assert not game.is_lost()
    assert game.cell(2, 2).visible and not game.cell(2, 2).mine
    assert game.mines_total() == 1
    check_adjacency(game.grid)


def test_first_click_without_safety_can_lose(make_grid):
    game = session(make_grid(5, 5, mines=[(2, 2)]), first_click_safe=False)
    assert game.reveal(2, 2) == []
    assert game.is_lost()
    assert game.cell(2, 2).exploded


def test_bad_luck_forces_a_mine_under_the_click(make_grid, check_adjacency):
    game = session(make_grid(5, 5, mines=[(0, 0)]), luck=LuckPolicy.BAD)

    game.reveal(3, 3)

    assert game.is_lost()
    assert game.cell(3, 3).mine and game.cell(3, 3).exploded
    assert game.mines_total() == 1
    check_adjacency(game.grid)


def test_good_luck_saves_click_next_to_revealed_cell(make_grid):
    # 1 shows 1 for the mine at 2; the mine can move to 0 instead.
    game = session(make_grid(5, 1, mines=[(2, 0)], visible=[(1, 0)]), luck=LuckPolicy.GOOD)
    assert not game.first_move

    game.reveal(2, 0)

    assert game.is_won()
    assert game.cell(0, 0).mine
    assert all(game.cell(x, 0).visible for x in range(1, 5))


def test_good_luck_does_not_help_far_from_revealed_cells(make_grid):
    game = session(make_grid(5, 1, mines=[(2, 0), (4, 0)], visible=[(1, 0)]), luck=LuckPolicy.GOOD)
    game.reveal(4, 0)
    assert game.is_lost()


def test_great_luck_falls_back_when_infeasible(make_grid):
    around = [(x, y) for y in range(3) for x in range(3) if (x, y) != (1, 1)]
    game = session(make_grid(3, 3, mines=[(1, 1)], visible=around), luck=LuckPolicy.GREAT)
    game.reveal(1, 1)
    assert game.is_lost()
    assert game.solver.stats()["infeasible_count"] == 1


def test_request_mine_state_delegates_to_solver(make_grid):
    game = session(make_grid(5, 5, mines=[(0, 0)]))
    assert game.request_mine_state(4, 4, True) is PlacementOutcome.SUCCESS
    assert game.cell(4, 4).mine
    assert game.mines_total() == 1


def test_reveal_wins_when_all_safe_cells_are_shown(make_grid):
    game = session(make_grid(3, 1, mines=[(0, 0)]))
    assert game.reveal(2, 0) == [(2, 0), (1, 0)]
    assert game.is_won()
    assert game.mines_displayed() == 1


def test_reveal_is_ignored_on_flags_visible_cells_and_after_game(make_grid):
    game = session(make_grid(4, 4, mines=[(0, 0)], flags=[(3, 3)]))
    assert game.reveal(3, 3) == []
    assert not game.cell(3, 3).visible

    game.reveal(2, 2)
    snapshot = copy.deepcopy(game.grid.cells)
    assert game.reveal(2, 2) == []
    assert game.grid.cells == snapshot

    game.claim_win()
    assert game.reveal(1, 0) == []


def test_reveal_out_of_bounds_raises(make_grid):
    game = session(make_grid(3, 3))
    with pytest.raises(ValueError):
        game.reveal(3, 3)


# -----------------------------------------------------------------------------
# Chording
# -----------------------------------------------------------------------------


def chord_board(make_grid):
    # Center shows 2 (mines at (0,0) and (2,2)); flags on (0,0) and the safe (2,0).
    return make_grid(3, 3, mines=[(0, 0), (2, 2)], visible=[(1, 1)], flags=[(0, 0), (2, 0)])


def test_chord_with_wrong_flag_reveals_and_explodes(make_grid, check_adjacency):
    game = session(chord_board(make_grid))

    revealed = game.chord(1, 1)

    assert set(revealed) == {(1, 0), (0, 1), (2, 1), (0, 2), (1, 2)}
    assert game.is_lost()
    assert game.cell(2, 2).exploded
    assert game.cell(2, 0).mistake and not game.cell(0, 0).mistake
    assert not game.cell(0, 0).visible and not game.cell(2, 0).visible
    assert game.mines_remaining() == 1
    check_adjacency(game.grid)


def test_chord_blocked_by_question_mark(make_grid):
    grid = chord_board(make_grid)
    grid.cell(1, 2).qmark = True
    game = session(grid, question_marks=True)
    snapshot = copy.deepcopy(grid.cells)

    assert game.chord(1, 1) == []
    assert grid.cells == snapshot
    assert game.status is GameStatus.ACTIVE


def test_chord_with_flag_count_mismatch_is_noop(make_grid):
    grid = make_grid(3, 3, mines=[(0, 0), (2, 2)], visible=[(1, 1)], flags=[(0, 0)])
    game = session(grid)
    assert game.chord(1, 1) == []
    assert game.visible_count == 1


def test_chord_on_hidden_cell_is_noop(make_grid):
    game = session(chord_board(make_grid))
    assert game.chord(1, 0) == []


def test_chord_with_correct_flags_clears_neighbors(make_grid):
    grid = make_grid(3, 3, mines=[(0, 0), (2, 2)], visible=[(1, 1)], flags=[(0, 0), (2, 2)])
    game = session(grid)
    game.chord(1, 1)
    assert game.is_won()


def test_chord_luck_moves_mine_off_revealed_neighbor(make_grid):
    # 1 shows 1 for the mine at 2, but the flag sits on 0.
    grid = make_grid(3, 1, mines=[(2, 0)], visible=[(1, 0)], flags=[(0, 0)])
    game = session(grid, luck=LuckPolicy.GREAT, chord_luck=True)

    game.chord(1, 0)

    assert game.is_won()
    assert game.cell(0, 0).mine


def test_chord_without_luck_is_truthful(make_grid):
    grid = make_grid(3, 1, mines=[(2, 0)], visible=[(1, 0)], flags=[(0, 0)])
    game = session(grid, luck=LuckPolicy.GREAT)
    game.chord(1, 0)
    assert game.is_lost()


# -----------------------------------------------------------------------------
# Flags, question marks and counters
# -----------------------------------------------------------------------------


def test_toggle_flag_cycle_without_question_marks(make_grid):
    game = session(make_grid(3, 3))
    game.toggle_flag(0, 0)
    assert game.cell(0, 0).flag
    game.toggle_flag(0, 0)
    assert not game.cell(0, 0).flag and not game.cell(0, 0).qmark


def test_toggle_flag_cycle_with_question_marks(make_grid):
    game = session(make_grid(3, 3), question_marks=True)
    game.toggle_flag(0, 0)
    game.toggle_flag(0, 0)
    assert game.cell(0, 0).qmark and not game.cell(0, 0).flag
    game.toggle_flag(0, 0)
    assert not game.cell(0, 0).qmark and not game.cell(0, 0).flag


def test_flags_are_not_placed_on_visible_cells(make_grid):
    game = session(make_grid(3, 3, visible=[(1, 1)]), question_marks=True)
    game.toggle_flag(1, 1)
    game.toggle_question_mark(1, 1)
    assert not game.cell(1, 1).flag and not game.cell(1, 1).qmark


def test_toggle_question_mark_requires_enabled(make_grid):
    game = session(make_grid(3, 3))
    game.toggle_question_mark(0, 0)
    assert not game.cell(0, 0).qmark

    game.set_question_marks_enabled(True)
    game.toggle_flag(0, 0)
    game.toggle_question_mark(0, 0)
    assert game.cell(0, 0).qmark and not game.cell(0, 0).flag


def test_disabling_question_marks_clears_them(make_grid):
    game = session(make_grid(3, 3), question_marks=True)
    game.toggle_question_mark(0, 0)
    game.toggle_question_mark(2, 2)

    game.set_question_marks_enabled(False)

    assert not any(c.qmark for c in game.grid.cells)
    assert not game.config.question_marks


def test_mines_remaining_counts_flags(make_grid):
    game = session(make_grid(4, 4, mines=[(0, 0), (3, 3)]))
    assert game.mines_remaining() == 2
    game.toggle_flag(0, 0)
    game.toggle_flag(1, 1)
    assert game.mines_remaining() == 0
    assert game.mines_displayed() == 0
    assert game.mines_total() == 2


def test_claim_win_with_exact_flags(make_grid):
    game = session(make_grid(4, 4, mines=[(0, 0), (3, 3)]))
    game.toggle_flag(0, 0)
    game.toggle_flag(3, 3)
    assert game.claim_win() is GameStatus.WON


def test_claim_win_with_wrong_flags_loses(make_grid):
    game = session(make_grid(4, 4, mines=[(0, 0), (3, 3)]))
    game.toggle_flag(0, 0)
    game.toggle_flag(1, 1)
    assert game.claim_win() is GameStatus.LOST
    assert game.cell(1, 1).mistake
    assert game.mines_remaining() == 1
    assert game.mines_displayed() == 2


def test_claim_win_with_mines_left_resigns(make_grid):
    game = session(make_grid(4, 4, mines=[(0, 0)]))
    assert game.claim_win() is GameStatus.LOST


# -----------------------------------------------------------------------------
# Whole games
# -----------------------------------------------------------------------------


@pytest.mark.parametrize("luck", list(LuckPolicy))
def test_random_play_keeps_numbers_consistent(luck, check_adjacency):
    rng = random.Random(luck.value)
    game = Minesweeper(10, 8, 0.17, config=GameConfig(luck=luck, compute_timeout=5.0), rng=rng)
    total = game.mines_total()

    while game.status is GameStatus.ACTIVE:
        hidden = [(x, y) for x, y in game.grid.coords() if game.cell(x, y).hidden]
        x, y = rng.choice(hidden)
        shown = {
            (cx, cy): game.cell(cx, cy).adjacent_mine_count
            for cx, cy in game.grid.coords()
            if game.cell(cx, cy).visible
        }

        game.reveal(x, y)

        for coord, number in shown.items():
            assert game.cell(*coord).adjacent_mine_count == number
            assert not game.cell(*coord).mine
        assert game.mines_total() == total
        check_adjacency(game.grid)


def test_great_luck_fast_path_on_first_click_skips_milp(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("unexpected MILP run")

    monkeypatch.setattr(placement, "milp", fail)
    game = Minesweeper(6, 6, 0.3, config=GameConfig(luck=LuckPolicy.GREAT), rng=random.Random(2))
    hidden_mine = next((c for c in game.grid.coords() if game.cell(*c).mine), None)
    assert hidden_mine is not None

    game.reveal(*hidden_mine)

    assert not game.is_lost()
    assert game.cell(*hidden_mine).visible


def test_format_board_plain_text(make_grid):
    game = session(make_grid(3, 1, mines=[(0, 0)], flags=[(1, 0)]))
    text = game.format_board(color=False)
    assert text.splitlines()[-1] == " 0 | .  F  ."

    full = game.format_board(reveal_all=True, color=False)
    assert full.splitlines()[-1] == " 0 | M  F  0"
