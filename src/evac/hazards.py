"""Hazard registry: point hazards tagged with the floor they belong to.

Presence is binary. A toggle at an occupied (x, y, floor) removes the
hazard, anywhere else it adds one, so the registry never holds duplicates.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from evac.geometry import Cell


@dataclass(frozen=True)
class Hazard:
    x: int
    y: int
    floor: int

    @property
    def cell(self) -> Cell:
        return (self.x, self.y)

    def to_dict(self) -> dict:
        return asdict(self)


class HazardRegistry:
    """Insertion-ordered set of hazards across all floors.

    Not thread-safe on its own; EvacuationState serialises access.
    """

    def __init__(self) -> None:
        self._hazards: dict[tuple[int, int, int], Hazard] = {}

    def toggle(self, cell: Cell, floor: int) -> bool:
        """Add or remove the hazard at cell/floor. Returns True if it now exists."""
        x, y = cell
        key = (x, y, floor)
        if key in self._hazards:
            del self._hazards[key]
            return False
        self._hazards[key] = Hazard(x, y, floor)
        return True

    def clear_floor(self, floor: int) -> int:
        """Remove every hazard on ``floor``. Returns how many were removed."""
        doomed = [k for k in self._hazards if k[2] == floor]
        for key in doomed:
            del self._hazards[key]
        return len(doomed)

    def hazards_on(self, floor: int) -> frozenset[Cell]:
        return frozenset(h.cell for h in self._hazards.values() if h.floor == floor)

    def all(self) -> list[Hazard]:
        return list(self._hazards.values())

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Hazard):
            item = (item.x, item.y, item.floor)
        return item in self._hazards

    def __len__(self) -> int:
        return len(self._hazards)
