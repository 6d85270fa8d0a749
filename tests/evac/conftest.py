"""Shared fixtures for evacuation core tests."""

from __future__ import annotations

import pytest

from evac.geometry import FloorGeometry, FloorPlans


@pytest.fixture
def hall() -> FloorGeometry:
    """10x10 floor, walls on the outer border only, one exit at (5, 0)."""
    return FloorGeometry.bordered(10, 10, exits=[(5, 0)])


@pytest.fixture
def plans(hall: FloorGeometry) -> FloorPlans:
    """Floors 1 and 2 both use the hall layout."""
    return FloorPlans({1: hall, 2: hall})
