
"""Pointer gestures -> grid cells (rectangle drag or single-cell targeting)"""
from typing import List, Optional, Tuple

import pygame

from make10_grid import Coordinate, Grid
from make10_layout import Dims

Point = Tuple[float, float]


def cell_rect(dims: Dims, r: int, c: int) -> pygame.Rect:
    """Screen-space footprint of a cell (full cell, margins included)."""
    return pygame.Rect(dims.board_x + c * dims.cell, dims.board_y + r * dims.cell, dims.cell, dims.cell)


def drag_rect(start: Point, current: Point) -> pygame.Rect:
    x1, x2 = sorted((start[0], current[0]))
    y1, y2 = sorted((start[1], current[1]))
    return pygame.Rect(int(x1), int(y1), int(x2 - x1), int(y2 - y1))


def _overlaps(a: pygame.Rect, b: pygame.Rect) -> bool:
    # inclusive on every edge, so a click or a line on a border still counts
    return not (a.right < b.left or a.left > b.right or a.bottom < b.top or a.top > b.bottom)


def cells_in_drag(grid: Grid, dims: Dims, start: Point, current: Point) -> List[Coordinate]:
    """Settled, non-removed cells whose rectangle touches the drag box."""
    box = drag_rect(start, current)
    out = []
    for r, c in grid.coords():
        t = grid.tile(r, c)
        if t.removed or not t.settled:
            continue
        if _overlaps(cell_rect(dims, r, c), box):
            out.append((r, c))
    return out


def point_to_cell(dims: Dims, pos: Point) -> Optional[Coordinate]:
    x, y = pos[0] - dims.board_x, pos[1] - dims.board_y
    if x < 0 or y < 0:
        return None
    c, r = int(x // dims.cell), int(y // dims.cell)
    if r >= dims.rows or c >= dims.cols:
        return None
    return r, c


class PointerGesture:
    """
    Tracks one pointer-down/move/up gesture and forwards it to the session.

    • Normal mode: drag a box; tiles under it light up; release resolves.
    • Delete mode: the pressed cell is handed to the targeted delete.
    """

    def __init__(self, session, dims: Dims):
        self.session = session
        self.dims = dims
        self.dragging = False
        self.start: Point = (0, 0)
        self.current: Point = (0, 0)

    def down(self, pos: Point):
        s = self.session
        if not s.playable:
            return
        if s.delete_mode:
            cell = point_to_cell(self.dims, pos)
            if cell is not None:
                s.use_delete(cell)
            return
        s.begin_selection()
        self.dragging = True
        self.start = pos
        self.current = pos
        self._preview()

    def move(self, pos: Point):
        if not self.dragging:
            return
        self.current = pos
        self._preview()

    def up(self):
        if not self.dragging:
            return None
        self.dragging = False
        coords = cells_in_drag(self.session.grid, self.dims, self.start, self.current)
        return self.session.resolve_selection(coords)

    def cancel(self):
        self.dragging = False
        if self.session.grid is not None:
            self.session.grid.clear_selected()

    def _preview(self):
        coords = cells_in_drag(self.session.grid, self.dims, self.start, self.current)
        self.session.preview_selection(coords)

    def box(self) -> Optional[pygame.Rect]:
        return drag_rect(self.start, self.current) if self.dragging else None
