"""Inbound message schemas for the evacuation protocol.

Optional fields carry their defaults here rather than in the handlers:
a missing or null floor is floor 1, a missing role is civilian, and a
missing intent is resolved from the role by the registry.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from evac.occupants import DEFAULT_FLOOR, Intent, Role


class _Message(BaseModel):
    model_config = ConfigDict(extra="ignore")


class _FloorDefault(_Message):
    floor: int = DEFAULT_FLOOR

    @field_validator("floor", mode="before")
    @classmethod
    def _default_floor(cls, v):
        return DEFAULT_FLOOR if v is None else v


class PositionReport(_FloorDefault):
    """``update_occupant``: where the sender is and what it is doing."""

    x: int
    y: int
    role: Role = Role.CIVILIAN
    intent: Optional[Intent] = None

    @field_validator("role", mode="before")
    @classmethod
    def _default_role(cls, v):
        return Role.CIVILIAN if v is None else v


class HazardToggle(_FloorDefault):
    """``toggle_hazard``: flip the hazard at a cell."""

    x: int
    y: int


class HazardClear(_FloorDefault):
    """``clear_hazards``: drop every hazard on one floor."""
