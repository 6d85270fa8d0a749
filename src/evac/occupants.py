"""Occupant model and registry.

An occupant is a tracked person on a floor.  Civilians always evacuate;
responders either evacuate or head for the nearest hazard.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from evac.geometry import Cell


class Role(str, Enum):
    CIVILIAN = "civilian"
    RESPONDER = "responder"


class Intent(str, Enum):
    EVACUATE = "evacuate"
    SEEK_HAZARD = "seek-hazard"


DEFAULT_FLOOR = 1


def floor_or_default(value) -> int:
    """Wire floor value; only a missing or null floor means floor 1."""
    return DEFAULT_FLOOR if value is None else int(value)


def resolve_intent(role: Role, intent: Optional[Intent]) -> Intent:
    """Effective intent for a role.

    Civilians are pinned to EVACUATE.  A responder with no stated intent
    goes toward hazards.
    """
    if role is Role.CIVILIAN:
        return Intent.EVACUATE
    if intent is None:
        return Intent.SEEK_HAZARD
    return intent


@dataclass(frozen=True)
class Occupant:
    """Immutable snapshot of one occupant's last report."""

    identity: str
    x: int
    y: int
    floor: int = 1
    role: Role = Role.CIVILIAN
    intent: Intent = Intent.EVACUATE

    @property
    def cell(self) -> Cell:
        return (self.x, self.y)

    @property
    def avoids_hazards(self) -> bool:
        """Everyone steers clear of hazards except responders seeking them."""
        return not (self.role is Role.RESPONDER and self.intent is Intent.SEEK_HAZARD)

    def to_dict(self) -> dict:
        return {
            "id": self.identity,
            "x": self.x,
            "y": self.y,
            "floor": self.floor,
            "role": self.role.value,
            "intent": self.intent.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Occupant:
        role = Role(data.get("role") or Role.CIVILIAN.value)
        raw_intent = data.get("intent")
        intent = resolve_intent(role, Intent(raw_intent) if raw_intent else None)
        return cls(
            identity=str(data["id"]),
            x=int(data["x"]),
            y=int(data["y"]),
            floor=floor_or_default(data.get("floor")),
            role=role,
            intent=intent,
        )


class OccupantRegistry:
    """Occupants keyed by identity.  Last write wins, no versioning."""

    def __init__(self) -> None:
        self._occupants: dict[str, Occupant] = {}

    def upsert(
        self,
        identity: str,
        cell: Cell,
        floor: int = 1,
        role: Role = Role.CIVILIAN,
        intent: Optional[Intent] = None,
    ) -> Occupant:
        x, y = cell
        occupant = Occupant(
            identity=identity,
            x=x,
            y=y,
            floor=floor,
            role=role,
            intent=resolve_intent(role, intent),
        )
        self._occupants[identity] = occupant
        return occupant

    def remove(self, identity: str) -> Optional[Occupant]:
        return self._occupants.pop(identity, None)

    def get(self, identity: str) -> Optional[Occupant]:
        return self._occupants.get(identity)

    def all(self) -> list[Occupant]:
        return list(self._occupants.values())

    def __contains__(self, identity: object) -> bool:
        return identity in self._occupants

    def __len__(self) -> int:
        return len(self._occupants)
