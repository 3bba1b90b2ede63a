# make10_layout.py
from dataclasses import dataclass
from typing import Optional, Tuple

import pygame

from make10_config import CONFIG

MARGIN = 16
PANEL_W = 220


@dataclass
class Dims:
    rows: int
    cols: int
    cell: int
    cell_margin: int
    board_x: int
    board_y: int
    panel_x: int
    panel_w: int
    total_w: int
    total_h: int

    @property
    def board_w(self) -> int:
        return self.cols * self.cell

    @property
    def board_h(self) -> int:
        return self.rows * self.cell

    @property
    def board_rect(self) -> pygame.Rect:
        return pygame.Rect(self.board_x, self.board_y, self.board_w, self.board_h)

    @property
    def panel_rect(self) -> pygame.Rect:
        return pygame.Rect(self.panel_x, self.board_y, self.panel_w, self.board_h)

    def cell_center(self, r: float, c: float) -> Tuple[float, float]:
        return self.board_x + (c + 0.5) * self.cell, self.board_y + (r + 0.5) * self.cell


def compute_dims(config: Optional[dict] = None) -> Dims:
    """Board on the left, HUD panel on the right, one margin around both."""
    cfg = config if config is not None else CONFIG
    rows, cols, cell = int(cfg["ROWS"]), int(cfg["COLS"]), int(cfg["CELL_SIZE"])
    panel_x = MARGIN + cols * cell + MARGIN
    return Dims(
        rows=rows, cols=cols, cell=cell, cell_margin=int(cfg["CELL_MARGIN"]),
        board_x=MARGIN, board_y=MARGIN,
        panel_x=panel_x, panel_w=PANEL_W,
        total_w=panel_x + PANEL_W + MARGIN,
        total_h=MARGIN + rows * cell + MARGIN,
    )
