import random

import pytest

from make10_errors import LogicError
from make10_grid import Grid
from make10_solver import find_match, has_match


def brute_force_has_match(grid, target=10):
    for top in range(grid.rows):
        for left in range(grid.cols):
            for bottom in range(top, grid.rows):
                for right in range(left, grid.cols):
                    cells = [(r, c) for r in range(top, bottom + 1) for c in range(left, right + 1)
                             if not grid.tile(r, c).removed]
                    if cells and sum(grid.tile(r, c).value for r, c in cells) == target:
                        return True
    return False


def test_finds_planted_rectangle():
    g = Grid.from_values([
        [9, 9, 9, 9],
        [9, 2, 3, 9],
        [9, 1, 4, 9],
    ])
    rect = find_match(g)
    assert (rect.top, rect.left, rect.bottom, rect.right) == (1, 1, 2, 2)
    assert rect.cells == ((1, 1), (1, 2), (2, 1), (2, 2))


def test_no_match_on_all_nines():
    g = Grid.from_values([[9] * 5 for _ in range(4)])
    assert find_match(g) is None
    assert not has_match(g)


def test_scan_order_prefers_top_left_then_narrowest():
    g = Grid.from_values([[5, 5], [5, 5]])
    rect = find_match(g)
    assert (rect.top, rect.left, rect.bottom, rect.right) == (0, 0, 0, 1)


def test_removed_tiles_are_skipped_inside_a_rectangle():
    g = Grid.from_values([[3, 9, 7]])
    g.mark_removed([(0, 1)])
    rect = find_match(g)
    assert rect.cells == ((0, 0), (0, 2))
    assert sum(g.tile(r, c).value for r, c in rect.cells) == 10


def test_agrees_with_brute_force_on_random_boards():
    rng = random.Random(11)
    for _ in range(200):
        rows, cols = rng.randint(1, 4), rng.randint(1, 4)
        g = Grid.from_values([[rng.randint(1, 9) for _ in range(cols)] for _ in range(rows)])
        for r, c in list(g.coords()):
            if rng.random() < 0.2:
                g.mark_removed([(r, c)])
        rect = find_match(g)
        assert (rect is not None) == brute_force_has_match(g)
        if rect is not None:
            assert sum(g.tile(r, c).value for r, c in rect.cells) == 10


def test_rejects_non_grid_and_bad_values():
    with pytest.raises(LogicError):
        find_match([[1, 9]])
    g = Grid.from_values([[0, 10]])
    with pytest.raises(LogicError):
        find_match(g)
