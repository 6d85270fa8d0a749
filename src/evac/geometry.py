"""Floor geometry: walls, exits and bounds for one floor of a building.

Coordinate convention: (x, y) for the API, [y, x] for array indexing.
Geometry is built once per floor and never mutated afterwards; a layout
change replaces the whole object.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

import numpy as np

Cell = tuple[int, int]


class FloorGeometry:
    """Impassable cells and exit cells of a single floor."""

    def __init__(
        self,
        width: int,
        height: int,
        walls: Iterable[Cell] = (),
        exits: Iterable[Cell] = (),
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Floor bounds must be positive, got {width}x{height}")
        self.width = width
        self.height = height

        mask = np.zeros((height, width), dtype=bool)
        for x, y in walls:
            if 0 <= x < width and 0 <= y < height:
                mask[y, x] = True
        mask.flags.writeable = False
        self._walls = mask

        exit_cells = frozenset((int(x), int(y)) for x, y in exits)
        clashing = sorted(c for c in exit_cells if self.is_wall(c))
        if clashing:
            raise ValueError(f"Exit cells overlap walls: {clashing}")
        self._exits = exit_cells

    @classmethod
    def bordered(
        cls,
        width: int,
        height: int,
        exits: Iterable[Cell] = (),
        walls: Iterable[Cell] = (),
    ) -> FloorGeometry:
        """Geometry whose outer ring is wall, except where an exit sits.

        Only ring cells give way to exits; an explicit wall under an exit
        still raises ValueError.
        """
        exit_cells = {(int(x), int(y)) for x, y in exits}
        ring = [
            (x, y)
            for x in range(width)
            for y in range(height)
            if (x in (0, width - 1) or y in (0, height - 1)) and (x, y) not in exit_cells
        ]
        return cls(width, height, walls=[*ring, *walls], exits=exit_cells)

    @property
    def wall_mask(self) -> np.ndarray:
        """Read-only boolean array, True = wall."""
        return self._walls

    def bounds(self) -> tuple[int, int]:
        return (self.width, self.height)

    def in_bounds(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.width and 0 <= y < self.height

    def is_wall(self, cell: Cell) -> bool:
        """True if the cell is impassable. Cells off the grid are not walls."""
        if not self.in_bounds(cell):
            return False
        x, y = cell
        return bool(self._walls[y, x])

    def exits(self) -> frozenset[Cell]:
        return self._exits

    def walls(self) -> list[Cell]:
        ys, xs = np.nonzero(self._walls)
        return [(int(x), int(y)) for x, y in zip(xs, ys)]

    def __repr__(self) -> str:
        return (
            f"FloorGeometry({self.width}x{self.height}, "
            f"walls={int(self._walls.sum())}, exits={len(self._exits)})"
        )


class FloorPlans:
    """Geometry for every known floor, keyed by floor number."""

    def __init__(self, floors: Optional[dict[int, FloorGeometry]] = None) -> None:
        self._floors: dict[int, FloorGeometry] = dict(floors or {})

    def get(self, floor: int) -> Optional[FloorGeometry]:
        return self._floors.get(floor)

    def replace(self, floor: int, geometry: FloorGeometry) -> None:
        """Swap in new geometry for a floor (floor change or resize)."""
        self._floors[floor] = geometry

    def floors(self) -> list[int]:
        return sorted(self._floors)

    def __contains__(self, floor: object) -> bool:
        return floor in self._floors

    def __iter__(self) -> Iterator[int]:
        return iter(self.floors())

    def __len__(self) -> int:
        return len(self._floors)
