"""Evacuation HTTP API: snapshot reads, authority-side routes, manual edits.

Every mutation here goes through the same ConnectionManager as the
WebSocket frames, so observers see HTTP edits exactly like socket edits.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Request

from app.routers import ws
from app.schemas import HazardClear, HazardToggle, PositionReport
from evac.geometry import FloorPlans
from evac.planner import routes_to_lists

router = APIRouter(prefix="/api", tags=["evacuation"])


def _get_plans(request: Request) -> FloorPlans:
    """Floor plans loaded at startup, or an empty set."""
    plans = getattr(request.app.state, "floor_plans", None)
    return plans if plans is not None else FloorPlans()


@router.get("/state")
async def get_state():
    """Current occupants and hazards, same shape as a state_update frame."""
    return ws.manager.state.snapshot().to_dict()


@router.get("/routes")
async def get_routes(request: Request):
    """Routes the authority computes for its own display."""
    routes = ws.manager.state.routes(_get_plans(request))
    return routes_to_lists(routes)


@router.get("/floors")
async def get_floors(request: Request):
    """Bounds and exits of every loaded floor."""
    plans = _get_plans(request)
    out = []
    for floor in plans:
        geometry = plans.get(floor)
        width, height = geometry.bounds()
        out.append({
            "floor": floor,
            "width": width,
            "height": height,
            "exits": sorted([x, y] for x, y in geometry.exits()),
        })
    return out


@router.put("/occupants/{identity}")
async def place_occupant(identity: str, report: PositionReport):
    """Manually place (or move) an occupant under a caller-chosen identity."""
    result = await ws.manager.apply(
        lambda s: s.report_position(
            identity, (report.x, report.y), report.floor, report.role, report.intent
        )
    )
    return result.detail["occupant"]


@router.delete("/occupants/{identity}")
async def withdraw_occupant(identity: str):
    """Explicitly withdraw an occupant."""
    result = await ws.manager.apply(lambda s: s.withdraw(identity))
    if not result.changed:
        raise HTTPException(404, f"Unknown occupant: {identity}")
    return {"status": "withdrawn", "id": identity}


@router.post("/hazards/toggle")
async def toggle_hazard(toggle: HazardToggle):
    result = await ws.manager.apply(
        lambda s: s.toggle_hazard((toggle.x, toggle.y), toggle.floor)
    )
    return {
        "x": toggle.x,
        "y": toggle.y,
        "floor": toggle.floor,
        "present": result.detail["present"],
    }


@router.post("/hazards/clear")
async def clear_hazards(clear: Optional[HazardClear] = None):
    clear = clear or HazardClear()
    result = await ws.manager.apply(lambda s: s.clear_hazards(clear.floor))
    return {"floor": clear.floor, "removed": result.detail["removed"]}
