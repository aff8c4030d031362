"""
NodeLogger - nodelogger/grid.py
Grid cells and the world <-> grid coordinate transform.
=======================================================
Version:     0.1
Stack:       Python 3.14 | numpy
Status:      Core value types.

Architecture notes
------------------
- A grid cell is an axis-aligned cube of side `cell_size`. Cell (0, 0, 0)
  spans [0, cell_size) on every axis.
- to_grid() uses true floor so negative positions quantize toward negative
  infinity: -0.5 with cell_size 1.0 lands in cell -1, never cell 0.
- to_world() returns the cell CENTER, which is what makes
  to_grid(to_world(c, s), s) == c hold for every integer c.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import product
from typing import Iterable, Iterator, List, Sequence, Tuple

import numpy as np

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class GridCoordinate:
    """Integer index of one grid cell. Hashable; used as set and history key."""
    x: int
    y: int
    z: int

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.x, self.y, self.z)

    def __str__(self) -> str:
        # Node-map line format. Keep in sync with node_map.parse_line().
        return f"({self.x}, {self.y}, {self.z})"


def _check_cell_size(cell_size: float) -> None:
    if not cell_size > 0:
        raise ValueError(f"cell_size must be positive, got {cell_size!r}")


def to_grid(position: Sequence[float], cell_size: float) -> GridCoordinate:
    """Quantize a continuous position to the cell containing it."""
    _check_cell_size(cell_size)
    cell = np.floor(np.asarray(position, dtype=np.float64) / cell_size)
    if cell.shape != (3,):
        raise ValueError(f"position must have 3 components, got {position!r}")
    return GridCoordinate(int(cell[0]), int(cell[1]), int(cell[2]))


def to_grid_many(positions: Iterable[Sequence[float]], cell_size: float) -> List[GridCoordinate]:
    """Vectorized to_grid(). Order of the result follows the input."""
    _check_cell_size(cell_size)
    arr = np.asarray(list(positions), dtype=np.float64)
    if arr.size == 0:
        return []
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"positions must be an (N, 3) array, got shape {arr.shape}")
    cells = np.floor(arr / cell_size).astype(np.int64)
    return [GridCoordinate(int(x), int(y), int(z)) for x, y, z in cells]


def to_world(coord: GridCoordinate, cell_size: float) -> Vec3:
    """World-space center of a cell."""
    _check_cell_size(cell_size)
    half = cell_size / 2
    return (
        coord.x * cell_size + half,
        coord.y * cell_size + half,
        coord.z * cell_size + half,
    )


def iter_box(corner_a: GridCoordinate, corner_b: GridCoordinate) -> Iterator[GridCoordinate]:
    """
    Every cell of the inclusive axis-aligned box spanned by two corners.
    Order is x-major, then y, then z, all ascending.
    """
    xs = range(min(corner_a.x, corner_b.x), max(corner_a.x, corner_b.x) + 1)
    ys = range(min(corner_a.y, corner_b.y), max(corner_a.y, corner_b.y) + 1)
    zs = range(min(corner_a.z, corner_b.z), max(corner_a.z, corner_b.z) + 1)
    for x, y, z in product(xs, ys, zs):
        yield GridCoordinate(x, y, z)
