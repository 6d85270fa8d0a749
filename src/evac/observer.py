"""ObserverView: the receiving end of the snapshot protocol.

An observer never merges: each snapshot replaces the previous occupant and
hazard view, and routes are recomputed from scratch for every occupant.
Because the planner is deterministic, two observers holding the same
geometry converge on the same routes without exchanging them.
"""

from __future__ import annotations

from typing import Optional

from loguru import logger

from evac.authority import Snapshot
from evac.geometry import FloorGeometry, FloorPlans
from evac.hazards import Hazard
from evac.occupants import Occupant
from evac.planner import Route, plan_routes

SNAPSHOT_TYPES = {"init", "state_update"}


class ObserverView:
    """Local copy of the authoritative state plus locally computed routes."""

    def __init__(self, plans: Optional[FloorPlans] = None) -> None:
        self.plans = plans if plans is not None else FloorPlans()
        self.identity: Optional[str] = None
        self.snapshot = Snapshot()
        self.routes: dict[str, Route] = {}

    @property
    def occupants(self) -> tuple[Occupant, ...]:
        return self.snapshot.occupants

    @property
    def hazards(self) -> tuple[Hazard, ...]:
        return self.snapshot.hazards

    def apply(self, message: dict) -> dict[str, Route]:
        """Adopt an ``init`` or ``state_update`` message and recompute routes.

        Raises:
            ValueError: If the message is not a snapshot.
        """
        msg_type = message.get("type")
        if msg_type not in SNAPSHOT_TYPES:
            raise ValueError(f"Not a snapshot message: {msg_type!r}")
        if msg_type == "init":
            self.identity = message.get("id")
        self.snapshot = Snapshot.from_dict(message)
        return self.recompute()

    def recompute(self) -> dict[str, Route]:
        """Re-run the planner over the held snapshot; the old routes are dropped."""
        self.routes = plan_routes(self.plans, self.snapshot.hazards, self.snapshot.occupants)
        logger.debug(f"Recomputed {len(self.routes)} route(s)")
        return self.routes

    def replace_geometry(self, floor: int, geometry: FloorGeometry) -> dict[str, Route]:
        """Swap in new geometry (floor change or resize) and recompute."""
        self.plans.replace(floor, geometry)
        return self.recompute()

    def my_route(self) -> Route:
        if self.identity is None:
            return []
        return self.routes.get(self.identity, [])
