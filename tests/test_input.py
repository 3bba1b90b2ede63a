import pygame

from make10_config import session_config
from make10_grid import Grid
from make10_input import PointerGesture, cell_rect, cells_in_drag, drag_rect, point_to_cell
from make10_layout import compute_dims
from tests.conftest import make_session


def small_dims():
    return compute_dims(session_config(ROWS=2, COLS=2))


def center(dims, r, c):
    rect = cell_rect(dims, r, c)
    return rect.centerx, rect.centery


def test_layout_puts_board_left_of_panel():
    dims = compute_dims(session_config())
    assert (dims.board_w, dims.board_h) == (400, 640)
    assert dims.panel_x == dims.board_x + dims.board_w + 16
    assert dims.total_w == dims.panel_x + dims.panel_w + 16


def test_cell_geometry():
    dims = small_dims()
    assert cell_rect(dims, 0, 0) == pygame.Rect(16, 16, 40, 40)
    assert cell_rect(dims, 1, 1) == pygame.Rect(56, 56, 40, 40)
    assert drag_rect((50, 60), (10, 20)) == pygame.Rect(10, 20, 40, 40)


def test_point_to_cell():
    dims = small_dims()
    assert point_to_cell(dims, (16, 16)) == (0, 0)
    assert point_to_cell(dims, (95, 60)) == (1, 1)
    assert point_to_cell(dims, (15, 30)) is None
    assert point_to_cell(dims, (96, 30)) is None


def test_click_inside_a_cell_selects_only_it():
    dims = small_dims()
    grid = Grid.from_values([[1, 2], [3, 4]])
    assert cells_in_drag(grid, dims, (30, 30), (30, 30)) == [(0, 0)]


def test_drag_covers_every_touched_cell():
    dims = small_dims()
    grid = Grid.from_values([[1, 2], [3, 4]])
    got = cells_in_drag(grid, dims, center(dims, 0, 0), center(dims, 1, 1))
    assert got == [(0, 0), (0, 1), (1, 0), (1, 1)]


def test_drag_skips_removed_and_falling_tiles():
    dims = small_dims()
    grid = Grid.from_values([[1, 2], [3, 4]])
    grid.mark_removed([(0, 1)])
    grid.tile(1, 0).fall_offset = -0.3
    got = cells_in_drag(grid, dims, center(dims, 0, 0), center(dims, 1, 1))
    assert got == [(0, 0), (1, 1)]


def test_gesture_drag_resolves_a_match():
    s = make_session([[3, 7], [9, 9]], ROWS=2, COLS=2)
    dims = compute_dims(s.cfg)
    g = PointerGesture(s, dims)
    g.down(center(dims, 0, 0))
    g.move(center(dims, 0, 1))
    assert s.grid.selected_coords() == [(0, 0), (0, 1)]
    assert g.box() is not None
    entry = g.up()
    assert entry is not None and entry.points == 200
    assert g.box() is None
    assert s.score == 200


def test_gesture_in_delete_mode_targets_one_cell():
    s = make_session([[3, 7], [3, 7]], ROWS=2, COLS=2, DEFER_REFILL_DURING_COMBO=False)
    dims = compute_dims(s.cfg)
    g = PointerGesture(s, dims)
    s.toggle_delete_mode()
    g.down(center(dims, 1, 1))
    assert not s.delete_available
    assert not s.delete_mode
    assert g.up() is None
    assert s.skill_log[0].detail == "1,1"


def test_gesture_ignored_when_not_playable():
    s = make_session([[3, 7]], ROWS=1, COLS=2)
    s.exit()
    g = PointerGesture(s, compute_dims(s.cfg))
    g.down((20, 20))
    assert not g.dragging


def test_cell_center_and_board_rect():
    dims = small_dims()
    assert dims.cell_center(0, 0) == (36.0, 36.0)
    assert dims.board_rect == pygame.Rect(16, 16, 80, 80)
    assert dims.panel_rect.left == dims.panel_x


def test_gesture_ignored_during_countdown():
    s = make_session([[3, 7]], ROWS=1, COLS=2)
    s.start("again")
    s.grid = Grid.from_values([[3, 7]])
    g = PointerGesture(s, compute_dims(s.cfg))
    g.down(center(g.dims, 0, 0))
    g.move(center(g.dims, 0, 1))
    assert not g.dragging
    assert g.up() is None
    assert s.grid.selected_coords() == []
