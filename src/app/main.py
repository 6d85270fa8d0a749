"""EVACROUTE - hazard-aware evacuation routing.

Main FastAPI application.
"""

import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.config import settings
from app.routers import evac_router, ws_router
from app.routers import ws
from evac.geometry import FloorPlans
from evac.layout import load_floor_plans

VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Startup helpers
# ---------------------------------------------------------------------------

def _configure_logging() -> None:
    """Route loguru to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if settings.debug else settings.log_level.upper())


def _load_floor_plans() -> FloorPlans:
    """Load the configured layout file.  Any failure leaves no geometry."""
    if not settings.floor_layout:
        logger.info("Floor layout: none configured (routes endpoint will be empty)")
        return FloorPlans()

    layout_path = Path(settings.floor_layout)
    if not layout_path.exists():
        logger.warning(f"Floor layout not found: {layout_path}")
        return FloorPlans()

    try:
        plans = load_floor_plans(layout_path)
    except (OSError, ValueError) as e:
        logger.warning(f"Floor layout unusable: {e}")
        return FloorPlans()

    for floor in plans:
        logger.info(f"Floor layout: floor {floor} -> {plans.get(floor)}")
    return plans


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    _configure_logging()
    logger.info("=" * 60)
    logger.info(f"  {settings.app_name} v{VERSION} - INITIALIZING")
    logger.info("=" * 60)

    app.state.floor_plans = _load_floor_plans()
    logger.info(f"Listening on {settings.host}:{settings.port}")

    yield

    connections = len(ws.manager.active_connections)
    logger.info(f"Shutting down ({connections} observer(s) still connected)")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title=settings.app_name,
    description="Hazard-aware evacuation routing",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ws_router)
app.include_router(evac_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "operational",
        "version": VERSION,
        "system": settings.app_name,
        "observers": len(ws.manager.active_connections),
    }


def serve() -> None:
    """Run the server with uvicorn (single worker: state is in-process)."""
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port, workers=1)


if __name__ == "__main__":
    serve()
