
"""Gravity / refill engine: column compaction, bulk refill, board generation"""
import logging
import random
from typing import List, Optional

from make10_grid import Grid, Tile
from make10_rng import ShuffleBag, fisher_yates
from make10_solver import has_match

logger = logging.getLogger(__name__)

Matrix = List[List[Tile]]


def _empty_matrix(rows: int, cols: int) -> Matrix:
    return [[None] * cols for _ in range(rows)]  # type: ignore[list-item]


def compact_and_drop(grid: Grid, bag: ShuffleBag, refill: bool = True) -> int:
    """
    Drop survivors to the bottom of each column, keeping their order, and
    pad the top with new tiles (or removed placeholders when refill=False).

    Every tile's fall_offset becomes (previous visual row - new row), so a
    renderer can animate from where it was drawn last. Returns the number
    of tiles dispensed from the bag.
    """
    R, C = grid.rows, grid.cols
    out = _empty_matrix(R, C)
    dispensed = 0
    for c in range(C):
        column = grid.column(c)
        survivors = [(r, t) for r, t in enumerate(column) if not t.removed]
        holes = [t for t in column if t.removed]
        missing = R - len(survivors)
        for r in range(missing):
            if refill:
                # drawn `missing` rows above its slot, stacked in order
                out[r][c] = Tile(bag.next(), fall_offset=float(-missing))
                dispensed += 1
            else:
                t = holes[r]
                t.selected = t.hinted = False
                t.fall_offset = 0.0
                out[r][c] = t
        for i, (old_r, t) in enumerate(survivors):
            new_r = missing + i
            t.fall_offset = (old_r + t.fall_offset) - new_r
            out[new_r][c] = t
    grid.replace_all(out)
    if dispensed:
        logger.debug("[gravity] compact refill=%s dispensed=%d", refill, dispensed)
    return dispensed


def _bulk_matrix(grid: Grid, bag: ShuffleBag) -> Matrix:
    R, C = grid.rows, grid.cols
    out = _empty_matrix(R, C)
    for c in range(C):
        column = grid.column(c)
        missing = sum(1 for t in column if t.removed)
        for r, t in enumerate(column):
            out[r][c] = Tile(bag.next(), fall_offset=float(-missing)) if t.removed else t
    return out


def bulk_refill(grid: Grid, bag: ShuffleBag, target: Optional[int] = None, attempts: int = 1) -> int:
    """
    Replace every removed slot in place with a fresh tile whose fall-in
    offset is the number of slots its column needed.

    With a target, up to `attempts` candidate fills are drawn until one
    leaves a solvable board; the last candidate is kept either way.
    Returns the number of slots filled.
    """
    missing = sum(1 for t in grid if t.removed)
    if not missing:
        return 0
    candidate = _bulk_matrix(grid, bag)
    if target is not None:
        tries = 1
        while not has_match(Grid(candidate), target) and tries < attempts:
            candidate = _bulk_matrix(grid, bag)
            tries += 1
        logger.debug("[gravity] bulk refill validated in %d attempt(s)", tries)
    grid.replace_all(candidate)
    return missing


def generate_values(rows: int, cols: int, bag: ShuffleBag, rng: random.Random,
                    mode: str = "pairs", target: int = 10) -> List[List[int]]:
    """
    Fresh board values. "pairs" plants (n, target - n) pairs and shuffles
    them so every value has a partner somewhere; "bag" draws from the bag.
    """
    total = rows * cols
    if mode == "pairs":
        lo, hi = max(1, target - 9), min(9, target - 1)
        flat: List[int] = []
        for _ in range(total // 2):
            n = rng.randint(lo, hi)
            flat.extend((n, target - n))
        while len(flat) < total:
            flat.append(bag.next())
        fisher_yates(flat, rng)
    elif mode == "bag":
        flat = [bag.next() for _ in range(total)]
    else:
        raise ValueError(f"unknown fill mode: {mode!r}")
    return [flat[r * cols:(r + 1) * cols] for r in range(rows)]


def fresh_board(rows: int, cols: int, bag: ShuffleBag, rng: random.Random, mode: str = "pairs",
                target: int = 10, attempts: int = 20) -> Grid:
    """New grid whose tiles all start one board-height above their rows."""
    grid = None
    for attempt in range(1, max(1, attempts) + 1):
        grid = Grid.from_values(generate_values(rows, cols, bag, rng, mode, target), fall_offset=float(-rows))
        if has_match(grid, target):
            break
        logger.debug("[gravity] generated board %d has no move, retrying", attempt)
    return grid
