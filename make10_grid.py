
"""Grid model: tile matrix, lifecycle flags, mutating primitives"""
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence, Tuple

from make10_errors import LogicError

Coordinate = Tuple[int, int]  # (row, col)


@dataclass
class Tile:
    value: int
    removed: bool = False
    selected: bool = False
    hinted: bool = False
    fall_offset: float = 0.0  # rows; negative = drawn above its resting row

    @property
    def active(self) -> bool:
        return not self.removed

    @property
    def settled(self) -> bool:
        return self.fall_offset == 0

    def to_dict(self):
        return {
            'value': self.value,
            'removed': self.removed,
            'selected': self.selected,
            'hinted': self.hinted,
            'fall_offset': self.fall_offset,
        }


class Grid:
    """
    Fixed ROWS x COLS matrix of Tile. Removal is a soft delete; the matrix
    never shrinks. Values change only through replace_all (gravity and
    construction) and permute_values (shuffle).
    """

    def __init__(self, tiles: List[List[Tile]]):
        if not tiles or not tiles[0]:
            raise LogicError("grid must have at least one row and one column")
        width = len(tiles[0])
        if any(len(row) != width for row in tiles):
            raise LogicError("ragged grid rows")
        self.rows = len(tiles)
        self.cols = width
        self._tiles = tiles

    @classmethod
    def from_values(cls, values: Sequence[Sequence[int]], fall_offset: float = 0.0) -> "Grid":
        return cls([[Tile(v, fall_offset=fall_offset) for v in row] for row in values])

    # ---------- read access ----------
    def tile(self, r: int, c: int) -> Tile:
        return self._tiles[r][c]

    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.rows and 0 <= c < self.cols

    def coords(self) -> Iterator[Coordinate]:
        for r in range(self.rows):
            for c in range(self.cols):
                yield r, c

    def active_coords(self) -> List[Coordinate]:
        return [(r, c) for r, c in self.coords() if not self._tiles[r][c].removed]

    def remaining(self) -> int:
        return sum(1 for row in self._tiles for t in row if not t.removed)

    def is_cleared(self) -> bool:
        return self.remaining() == 0

    def has_holes(self) -> bool:
        return any(t.removed for row in self._tiles for t in row)

    def column(self, c: int) -> List[Tile]:
        return [self._tiles[r][c] for r in range(self.rows)]

    def snapshot(self) -> List[List[dict]]:
        return [[t.to_dict() for t in row] for row in self._tiles]

    def __iter__(self) -> Iterator[Tile]:
        for row in self._tiles:
            yield from row

    # ---------- mutating primitives ----------
    def mark_removed(self, coords: Iterable[Coordinate]) -> int:
        """Soft-delete tiles; already removed ones are skipped. Returns newly removed count."""
        n = 0
        for r, c in coords:
            if not self.in_bounds(r, c):
                raise LogicError(f"coordinate out of bounds: {(r, c)}")
            t = self._tiles[r][c]
            if t.removed:
                continue
            t.removed = True
            t.selected = False
            t.hinted = False
            n += 1
        return n

    def replace_all(self, tiles: List[List[Tile]]):
        if len(tiles) != self.rows or any(len(row) != self.cols for row in tiles):
            raise LogicError("replacement matrix does not match grid size")
        self._tiles = tiles

    def permute_values(self, values: Sequence[int]):
        """Reassign values to the active tiles in row-major order."""
        active = [t for t in self if not t.removed]
        if len(values) != len(active):
            raise LogicError(f"expected {len(active)} values, got {len(values)}")
        for t, v in zip(active, values):
            t.value = v

    # ---------- transient flags ----------
    def set_selected(self, coords: Iterable[Coordinate]):
        want = set(coords)
        for r, c in self.coords():
            t = self._tiles[r][c]
            t.selected = (r, c) in want and not t.removed

    def clear_selected(self):
        for t in self:
            t.selected = False

    def selected_coords(self) -> List[Coordinate]:
        return [(r, c) for r, c in self.coords() if self._tiles[r][c].selected and not self._tiles[r][c].removed]

    def set_hinted(self, coords: Iterable[Coordinate]):
        for r, c in coords:
            self._tiles[r][c].hinted = True

    def clear_hinted(self):
        for t in self:
            t.hinted = False

    def settle(self, rows: float):
        """Move every fall offset up to `rows` toward 0, snapping to exactly 0."""
        for t in self:
            if t.fall_offset < 0:
                t.fall_offset = min(0.0, t.fall_offset + rows)
                if t.fall_offset > -1e-9:
                    t.fall_offset = 0.0
            elif t.fall_offset > 0:
                t.fall_offset = max(0.0, t.fall_offset - rows)
