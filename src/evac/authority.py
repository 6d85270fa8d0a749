"""EvacuationState: the single owner of the occupant and hazard registries.

Every mutation goes through this object and runs to completion under one
lock, so a snapshot taken afterwards always reflects whole mutations.
Callers that broadcast (the WebSocket layer) take the snapshot returned by
the mutating call rather than reading the registries themselves.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from evac.geometry import Cell, FloorPlans
from evac.hazards import Hazard, HazardRegistry
from evac.occupants import Intent, Occupant, OccupantRegistry, Role, floor_or_default
from evac.planner import Route, plan_routes


@dataclass(frozen=True)
class Snapshot:
    """Full copy of both registries at one instant."""

    occupants: tuple[Occupant, ...] = ()
    hazards: tuple[Hazard, ...] = ()

    def to_dict(self) -> dict:
        return {
            "occupants": [o.to_dict() for o in self.occupants],
            "hazards": [h.to_dict() for h in self.hazards],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Snapshot:
        return cls(
            occupants=tuple(Occupant.from_dict(o) for o in data.get("occupants") or []),
            hazards=tuple(
                Hazard(int(h["x"]), int(h["y"]), floor_or_default(h.get("floor")))
                for h in data.get("hazards") or []
            ),
        )


@dataclass
class MutationResult:
    """Outcome of a mutation plus the snapshot to publish for it."""

    snapshot: Snapshot
    changed: bool = True
    detail: dict = field(default_factory=dict)


class EvacuationState:
    """In-memory authoritative state.  Nothing is persisted."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._occupants = OccupantRegistry()
        self._hazards = HazardRegistry()

    # -- mutations ---------------------------------------------------------

    def report_position(
        self,
        identity: str,
        cell: Cell,
        floor: int = 1,
        role: Role = Role.CIVILIAN,
        intent: Optional[Intent] = None,
    ) -> MutationResult:
        """Create or overwrite the occupant for ``identity``."""
        with self._lock:
            occupant = self._occupants.upsert(identity, cell, floor, role, intent)
            logger.debug(
                f"Occupant {identity} at {cell} floor {floor} "
                f"({occupant.role.value}/{occupant.intent.value})"
            )
            return MutationResult(self._snapshot_locked(), detail={"occupant": occupant.to_dict()})

    def toggle_hazard(self, cell: Cell, floor: int = 1) -> MutationResult:
        with self._lock:
            present = self._hazards.toggle(cell, floor)
            logger.debug(f"Hazard {'added' if present else 'removed'} at {cell} floor {floor}")
            return MutationResult(self._snapshot_locked(), detail={"present": present})

    def clear_hazards(self, floor: int = 1) -> MutationResult:
        with self._lock:
            removed = self._hazards.clear_floor(floor)
            logger.debug(f"Cleared {removed} hazard(s) on floor {floor}")
            return MutationResult(self._snapshot_locked(), detail={"removed": removed})

    def withdraw(self, identity: str) -> MutationResult:
        """Drop an occupant.  Unknown identities leave the registry unchanged."""
        with self._lock:
            occupant = self._occupants.remove(identity)
            if occupant is not None:
                logger.debug(f"Occupant {identity} withdrawn")
            return MutationResult(
                self._snapshot_locked(),
                changed=occupant is not None,
                detail={"occupant": occupant.to_dict() if occupant else None},
            )

    # -- reads -------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        with self._lock:
            return self._snapshot_locked()

    def has_occupant(self, identity: str) -> bool:
        with self._lock:
            return identity in self._occupants

    def routes(self, plans: FloorPlans) -> dict[str, Route]:
        """Routes for every occupant, as the authority would display them."""
        snap = self.snapshot()
        return plan_routes(plans, snap.hazards, snap.occupants)

    def _snapshot_locked(self) -> Snapshot:
        return Snapshot(
            occupants=tuple(self._occupants.all()),
            hazards=tuple(self._hazards.all()),
        )
