"""Evacuation core: floor geometry, registries, route planner, snapshot protocol."""
from .authority import EvacuationState, MutationResult, Snapshot
from .geometry import Cell, FloorGeometry, FloorPlans
from .hazards import Hazard, HazardRegistry
from .layout import load_floor_plans
from .observer import ObserverView
from .occupants import Intent, Occupant, OccupantRegistry, Role
from .planner import cost_field, find_route, goal_cells, plan_route, plan_routes, route_cost

__all__ = [
    "Cell",
    "EvacuationState",
    "FloorGeometry",
    "FloorPlans",
    "Hazard",
    "HazardRegistry",
    "Intent",
    "MutationResult",
    "ObserverView",
    "Occupant",
    "OccupantRegistry",
    "Role",
    "Snapshot",
    "cost_field",
    "find_route",
    "goal_cells",
    "load_floor_plans",
    "plan_route",
    "plan_routes",
    "route_cost",
]
