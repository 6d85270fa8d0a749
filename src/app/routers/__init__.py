"""API routers for EVACROUTE."""

from app.routers.ws import router as ws_router
from app.routers.evac import router as evac_router

__all__ = ["evac_router", "ws_router"]
