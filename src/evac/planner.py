"""Hazard-weighted route planner: plan_route() picks goals by role and intent.

Goal rules:
    - Civilian, or responder evacuating: the floor's exits
    - Responder seeking hazards: hazards on its floor, exits if there are none

Cost of entering a cell:
    - Wall: impassable
    - Otherwise 1, plus floor((HAZARD_FALLOFF - d) * HAZARD_WEIGHT) for every
      hazard closer than HAZARD_RADIUS, when the occupant avoids hazards.
      Surcharges from overlapping hazards add up without a cap.

Search is Dijkstra on the 4-connected grid with a binary heap.  Entries of
equal cost are finalized in the order they were discovered, which keeps
routes reproducible between independent observers.
"""

from __future__ import annotations

import heapq
import itertools
import math
from typing import Iterable, Mapping, Optional

import numpy as np

from evac.geometry import Cell, FloorGeometry, FloorPlans
from evac.hazards import Hazard
from evac.occupants import Intent, Occupant, Role

# Hazard influence; stacking is intentionally uncapped.
HAZARD_RADIUS = 4.0
HAZARD_FALLOFF = 4.5
HAZARD_WEIGHT = 10.0

BASE_COST = 1

# Relaxation order matters for tie-breaking: down, up, right, left.
NEIGHBOR_OFFSETS: tuple[Cell, ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))

Route = list[Cell]


def goal_cells(
    geometry: FloorGeometry, hazards: frozenset[Cell], occupant: Occupant
) -> frozenset[Cell]:
    """Candidate goals for the occupant.  ``hazards`` must be on its floor."""
    seeking = occupant.role is Role.RESPONDER and occupant.intent is Intent.SEEK_HAZARD
    if seeking and hazards:
        return hazards
    return geometry.exits()


def cost_field(
    geometry: FloorGeometry, hazards: Iterable[Cell] = (), avoid: bool = True
) -> np.ndarray:
    """Per-cell entry cost as a float array indexed [y, x]; walls are inf."""
    width, height = geometry.bounds()
    costs = np.full((height, width), float(BASE_COST))

    if avoid:
        ys, xs = np.mgrid[0:height, 0:width]
        for hx, hy in hazards:
            # Integer squares keep the distance identical to a scalar sqrt.
            dist = np.sqrt((xs - hx) ** 2 + (ys - hy) ** 2)
            near = dist < HAZARD_RADIUS
            costs[near] += np.floor((HAZARD_FALLOFF - dist[near]) * HAZARD_WEIGHT)

    costs[geometry.wall_mask] = np.inf
    return costs


def find_route(costs: np.ndarray, start: Cell, goals: frozenset[Cell]) -> Route:
    """Least-cost route from start to the nearest goal, or [] if none is reachable.

    The start cell is accepted as-is, even if it is a wall or off the grid;
    only its neighbours are checked.
    """
    if not goals:
        return []

    height, width = costs.shape
    seq = itertools.count()
    frontier: list[tuple[int, int, Cell, Optional[Cell]]] = [(0, next(seq), start, None)]
    finalized: dict[Cell, int] = {}
    came_from: dict[Cell, Optional[Cell]] = {}

    while frontier:
        cost, _, cell, parent = heapq.heappop(frontier)
        if cell in finalized and finalized[cell] <= cost:
            continue
        finalized[cell] = cost
        came_from[cell] = parent

        if cell in goals:
            return _reconstruct(came_from, cell)

        x, y = cell
        for dx, dy in NEIGHBOR_OFFSETS:
            nx, ny = x + dx, y + dy
            if not (0 <= nx < width and 0 <= ny < height):
                continue
            step = costs[ny, nx]
            if math.isinf(step):
                continue
            new_cost = cost + int(step)
            nxt = (nx, ny)
            if nxt not in finalized or finalized[nxt] > new_cost:
                heapq.heappush(frontier, (new_cost, next(seq), nxt, cell))

    return []


def _reconstruct(came_from: dict[Cell, Optional[Cell]], goal: Cell) -> Route:
    route = [goal]
    node = came_from[goal]
    while node is not None:
        route.append(node)
        node = came_from[node]
    route.reverse()
    return route


def route_cost(route: Route, costs: np.ndarray) -> int:
    """Sum of entry costs along a route; the start cell is free."""
    return sum(int(costs[y, x]) for x, y in route[1:])


def plan_route(
    geometry: FloorGeometry, hazards: frozenset[Cell], occupant: Occupant
) -> Route:
    """Route one occupant.  ``hazards`` are the hazard cells on its floor.

    Pure: identical inputs always give the identical route.
    """
    costs = cost_field(geometry, hazards, avoid=occupant.avoids_hazards)
    return find_route(costs, occupant.cell, goal_cells(geometry, hazards, occupant))


def plan_routes(
    plans: FloorPlans,
    hazards: Iterable[Hazard],
    occupants: Iterable[Occupant],
) -> dict[str, Route]:
    """Route every occupant against the geometry of its own floor.

    Occupants on a floor with no known geometry get an empty route.
    Cost fields are shared between occupants with the same floor and
    avoidance so a full recomputation stays cheap.
    """
    by_floor: dict[int, set[Cell]] = {}
    for hazard in hazards:
        by_floor.setdefault(hazard.floor, set()).add(hazard.cell)

    fields: dict[tuple[int, bool], np.ndarray] = {}
    routes: dict[str, Route] = {}
    for occupant in occupants:
        geometry = plans.get(occupant.floor)
        if geometry is None:
            routes[occupant.identity] = []
            continue
        floor_hazards = frozenset(by_floor.get(occupant.floor, ()))
        key = (occupant.floor, occupant.avoids_hazards)
        if key not in fields:
            fields[key] = cost_field(geometry, floor_hazards, avoid=occupant.avoids_hazards)
        routes[occupant.identity] = find_route(
            fields[key],
            occupant.cell,
            goal_cells(geometry, floor_hazards, occupant),
        )
    return routes


def routes_to_lists(routes: Mapping[str, Route]) -> dict[str, list[list[int]]]:
    """JSON-friendly form: {id: [[x, y], ...]}."""
    return {ident: [[x, y] for x, y in route] for ident, route in routes.items()}
