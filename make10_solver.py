
"""Rectangle-sum solver: hints, deadlock checks, shuffle validation"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from make10_errors import LogicError
from make10_grid import Coordinate, Grid


@dataclass(frozen=True)
class Rectangle:
    top: int
    left: int
    bottom: int   # inclusive
    right: int    # inclusive
    cells: Tuple[Coordinate, ...]


def _prefix_tables(grid: Grid) -> Tuple[List[List[int]], List[List[int]]]:
    """(rows+1) x (cols+1) prefix sums of active values and active counts."""
    R, C = grid.rows, grid.cols
    sums = [[0] * (C + 1) for _ in range(R + 1)]
    counts = [[0] * (C + 1) for _ in range(R + 1)]
    for r in range(R):
        run_s = run_n = 0
        for c in range(C):
            t = grid.tile(r, c)
            if not t.removed:
                if not isinstance(t.value, int) or not 1 <= t.value <= 9:
                    raise LogicError(f"tile {(r, c)} has invalid value {t.value!r}")
                run_s += t.value
                run_n += 1
            sums[r + 1][c + 1] = sums[r][c + 1] + run_s
            counts[r + 1][c + 1] = counts[r][c + 1] + run_n
    return sums, counts


def _box(table, top, left, bottom, right) -> int:
    return (table[bottom + 1][right + 1] - table[top][right + 1]
            - table[bottom + 1][left] + table[top][left])


def find_match(grid: Grid, target: int = 10) -> Optional[Rectangle]:
    """
    Return the first rectangle whose active tiles sum to `target`.

    Scan order: top-left corner row-major, then bottom-right corner
    row-major. A rectangle needs at least one active tile. Values are
    positive, so a band stops widening once its sum passes the target.
    """
    if not isinstance(grid, Grid):
        raise LogicError("find_match expects a Grid")
    sums, counts = _prefix_tables(grid)
    R, C = grid.rows, grid.cols
    for top in range(R):
        for left in range(C):
            for bottom in range(top, R):
                for right in range(left, C):
                    s = _box(sums, top, left, bottom, right)
                    if s > target:
                        break
                    if s == target and _box(counts, top, left, bottom, right) > 0:
                        cells = tuple((r, c)
                                      for r in range(top, bottom + 1)
                                      for c in range(left, right + 1)
                                      if not grid.tile(r, c).removed)
                        return Rectangle(top, left, bottom, right, cells)
    return None


def has_match(grid: Grid, target: int = 10) -> bool:
    return find_match(grid, target) is not None
