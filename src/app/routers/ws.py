"""WebSocket endpoint for the authoritative snapshot protocol.

Each observer connection moves connecting -> active -> closed.  On entering
active it receives one ``init`` snapshot carrying its assigned identity.
Every accepted mutation is followed by a full ``state_update`` to every
active connection, the originator included.  Mutation and broadcast share
one lock, so snapshots reach each observer in mutation order.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from loguru import logger
from pydantic import BaseModel, ValidationError

from app.schemas import HazardClear, HazardToggle, PositionReport
from evac.authority import EvacuationState, MutationResult, Snapshot

router = APIRouter(prefix="/ws", tags=["websocket"])

Mutation = Callable[[EvacuationState], MutationResult]


class ConnectionState(Enum):
    CONNECTING = "connecting"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class ObserverConnection:
    """One observer's transport plus the occupant identity it reports as."""

    websocket: WebSocket
    identity: str
    state: ConnectionState = ConnectionState.CONNECTING


def _snapshot_message(msg_type: str, snapshot: Snapshot, **extra) -> dict:
    return {"type": msg_type, **extra, **snapshot.to_dict()}


class ConnectionManager:
    """Owns the authoritative state and every observer connection."""

    def __init__(self, state: Optional[EvacuationState] = None):
        self.state = state if state is not None else EvacuationState()
        self.connections: dict[WebSocket, ObserverConnection] = {}
        self._lock = asyncio.Lock()

    @property
    def active_connections(self) -> set[WebSocket]:
        return {
            ws for ws, conn in self.connections.items()
            if conn.state is ConnectionState.ACTIVE
        }

    def connection_for(self, websocket: WebSocket) -> Optional[ObserverConnection]:
        return self.connections.get(websocket)

    async def connect(self, websocket: WebSocket) -> ObserverConnection:
        """Accept a connection, send its init snapshot, and mark it active."""
        await websocket.accept()
        conn = ObserverConnection(websocket=websocket, identity=uuid.uuid4().hex)
        async with self._lock:
            self.connections[websocket] = conn
            init = _snapshot_message("init", self.state.snapshot(), id=conn.identity)
            try:
                await websocket.send_text(json.dumps(init))
            except Exception as e:
                logger.warning(f"Failed to send init to {conn.identity}: {e}")
                conn.state = ConnectionState.CLOSED
                del self.connections[websocket]
                return conn
            conn.state = ConnectionState.ACTIVE
        logger.info(
            f"Observer {conn.identity} connected. "
            f"Total connections: {len(self.active_connections)}"
        )
        return conn

    async def disconnect(self, websocket: WebSocket):
        """Close a connection, drop its occupant, and rebroadcast.  Idempotent."""
        async with self._lock:
            conn = self.connections.pop(websocket, None)
            if conn is None:
                return
            conn.state = ConnectionState.CLOSED
            result = self.state.withdraw(conn.identity)
            await self._broadcast_locked(result.snapshot)
        logger.info(
            f"Observer {conn.identity} disconnected. "
            f"Total connections: {len(self.active_connections)}"
        )

    async def apply(self, mutation: Mutation) -> MutationResult:
        """Run one mutation to completion and publish the resulting snapshot."""
        async with self._lock:
            result = mutation(self.state)
            if result.changed:
                await self._broadcast_locked(result.snapshot)
            return result

    async def send_to(self, websocket: WebSocket, message: dict):
        """Send a message to a specific client."""
        try:
            await websocket.send_text(json.dumps(message))
        except Exception as e:
            logger.warning(f"Failed to send to websocket: {e}")

    async def _send_all(self, text: str) -> list[ObserverConnection]:
        dead = []
        for conn in list(self.connections.values()):
            if conn.state is not ConnectionState.ACTIVE:
                continue
            try:
                await conn.websocket.send_text(text)
            except Exception as e:
                logger.warning(f"Failed to send to observer {conn.identity}: {e}")
                dead.append(conn)
        return dead

    async def _broadcast_locked(self, snapshot: Snapshot):
        dead = await self._send_all(json.dumps(_snapshot_message("state_update", snapshot)))
        if dead:
            await self._drop_locked(dead)

    async def _drop_locked(self, dead: list[ObserverConnection]):
        # A failed send closes that connection; its occupant goes too, and the
        # survivors get the resulting snapshot.  Repeats until a pass is clean.
        while dead:
            for conn in dead:
                conn.state = ConnectionState.CLOSED
                self.connections.pop(conn.websocket, None)
                self.state.withdraw(conn.identity)
            snapshot = self.state.snapshot()
            dead = await self._send_all(
                json.dumps(_snapshot_message("state_update", snapshot))
            )


# Global connection manager
manager = ConnectionManager()


@router.websocket("/live")
async def websocket_live(websocket: WebSocket):
    """Observer endpoint: init snapshot on connect, state_update on every change."""
    conn = await manager.connect(websocket)
    if conn.state is ConnectionState.CLOSED:
        return
    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await manager.send_to(
                    websocket, {"type": "error", "message": "Invalid JSON"}
                )
                continue
            await handle_client_message(websocket, message)
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket)


def _parse(model: type[BaseModel], message: dict) -> Optional[BaseModel]:
    try:
        return model.model_validate(message)
    except ValidationError as e:
        logger.warning(f"Malformed {message.get('type')} frame: {e.error_count()} error(s)")
        return None


async def handle_client_message(websocket: WebSocket, message: dict):
    """Apply one frame from an observer.  Bad frames only earn the sender an error."""
    if not isinstance(message, dict):
        await manager.send_to(
            websocket, {"type": "error", "message": "Message must be a JSON object"}
        )
        return

    msg_type = message.get("type")

    if msg_type == "ping":
        await manager.send_to(
            websocket,
            {"type": "pong", "timestamp": datetime.now(timezone.utc).isoformat()},
        )
        return

    conn = manager.connection_for(websocket)
    if conn is None or conn.state is not ConnectionState.ACTIVE:
        logger.warning(f"Dropping {msg_type} frame from inactive connection")
        return
    identity = conn.identity

    if msg_type == "update_occupant":
        report = _parse(PositionReport, message)
        if report is None:
            await _reject(websocket, msg_type)
            return
        await manager.apply(
            lambda s: s.report_position(
                identity, (report.x, report.y), report.floor, report.role, report.intent
            )
        )
    elif msg_type == "toggle_hazard":
        toggle = _parse(HazardToggle, message)
        if toggle is None:
            await _reject(websocket, msg_type)
            return
        await manager.apply(lambda s: s.toggle_hazard((toggle.x, toggle.y), toggle.floor))
    elif msg_type == "clear_hazards":
        clear = _parse(HazardClear, message)
        if clear is None:
            await _reject(websocket, msg_type)
            return
        await manager.apply(lambda s: s.clear_hazards(clear.floor))
    elif msg_type == "withdraw":
        await manager.apply(lambda s: s.withdraw(identity))
    else:
        await manager.send_to(
            websocket,
            {"type": "error", "message": f"Unknown message type: {msg_type}"},
        )


async def _reject(websocket: WebSocket, msg_type: str):
    await manager.send_to(
        websocket,
        {"type": "error", "message": f"Invalid {msg_type} payload"},
    )
