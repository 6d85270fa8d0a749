"""Tests for FloorGeometry and FloorPlans."""

from __future__ import annotations

import numpy as np
import pytest

from evac.geometry import FloorGeometry, FloorPlans

pytestmark = pytest.mark.unit


class TestFloorGeometry:
    """Walls, exits and bounds."""

    def test_bounds(self):
        geo = FloorGeometry(7, 3)
        assert geo.bounds() == (7, 3)

    def test_walls_are_walls(self):
        geo = FloorGeometry(5, 5, walls=[(1, 2), (3, 3)])
        assert geo.is_wall((1, 2))
        assert geo.is_wall((3, 3))
        assert not geo.is_wall((2, 1))

    def test_off_grid_is_not_wall(self):
        geo = FloorGeometry(5, 5, walls=[(0, 0)])
        assert not geo.is_wall((-1, 0))
        assert not geo.is_wall((5, 5))
        assert not geo.in_bounds((5, 5))

    def test_off_grid_walls_are_dropped(self):
        geo = FloorGeometry(3, 3, walls=[(10, 10), (1, 1)])
        assert geo.walls() == [(1, 1)]

    def test_wall_mask_indexed_y_x(self):
        geo = FloorGeometry(4, 2, walls=[(3, 1)])
        assert geo.wall_mask.shape == (2, 4)
        assert geo.wall_mask[1, 3]

    def test_wall_mask_is_read_only(self):
        geo = FloorGeometry(3, 3)
        with pytest.raises(ValueError):
            geo.wall_mask[0, 0] = True

    def test_exits(self):
        geo = FloorGeometry(5, 5, exits=[(0, 2), (4, 2)])
        assert geo.exits() == frozenset({(0, 2), (4, 2)})

    def test_exit_on_wall_rejected(self):
        with pytest.raises(ValueError, match="overlap"):
            FloorGeometry(5, 5, walls=[(2, 2)], exits=[(2, 2)])

    def test_non_positive_bounds_rejected(self):
        with pytest.raises(ValueError):
            FloorGeometry(0, 5)

    def test_bordered_rings_floor(self, hall):
        mask = hall.wall_mask
        assert mask[0, :].sum() == 9  # exit at (5, 0) stays open
        assert mask[-1, :].all()
        assert mask[:, 0].all()
        assert mask[:, -1].all()
        assert not mask[1:-1, 1:-1].any()

    def test_bordered_leaves_exit_open(self, hall):
        assert not hall.is_wall((5, 0))
        assert (5, 0) in hall.exits()

    def test_bordered_extra_walls(self):
        geo = FloorGeometry.bordered(6, 6, exits=[(0, 3)], walls=[(2, 2)])
        assert geo.is_wall((2, 2))
        assert not geo.is_wall((0, 3))

    def test_bordered_explicit_wall_on_exit_rejected(self):
        with pytest.raises(ValueError, match="overlap"):
            FloorGeometry.bordered(6, 6, exits=[(0, 3)], walls=[(0, 3)])

    def test_walls_listing_matches_mask(self, hall):
        assert len(hall.walls()) == int(np.count_nonzero(hall.wall_mask))


class TestFloorPlans:
    """Floor number -> geometry lookup."""

    def test_empty(self):
        plans = FloorPlans()
        assert len(plans) == 0
        assert plans.get(1) is None

    def test_lookup(self, hall):
        plans = FloorPlans({1: hall})
        assert plans.get(1) is hall
        assert 1 in plans
        assert 2 not in plans

    def test_replace_swaps_whole_floor(self, hall):
        plans = FloorPlans({1: hall})
        other = FloorGeometry(3, 3)
        plans.replace(1, other)
        assert plans.get(1) is other

    def test_floors_sorted(self, hall):
        plans = FloorPlans({3: hall, 1: hall, 2: hall})
        assert plans.floors() == [1, 2, 3]
        assert list(plans) == [1, 2, 3]
