"""Tests for the JSON layout loader."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from evac.layout import load_floor_plans, parse_floor

pytestmark = pytest.mark.unit

DEMO_LAYOUT = Path(__file__).resolve().parents[2] / "layouts" / "demo.json"


def _write(tmp_path, data) -> Path:
    path = tmp_path / "layout.json"
    path.write_text(json.dumps(data))
    return path


class TestParseFloor:
    """One floor dict -> geometry."""

    def test_plain_floor(self):
        floor, geo = parse_floor(
            {"floor": 2, "width": 6, "height": 4, "walls": [[1, 1]], "exits": [[5, 3]]}
        )
        assert floor == 2
        assert geo.bounds() == (6, 4)
        assert geo.is_wall((1, 1))
        assert geo.exits() == frozenset({(5, 3)})

    def test_floor_defaults_to_one(self):
        floor, _ = parse_floor({"width": 3, "height": 3})
        assert floor == 1

    def test_border(self):
        _, geo = parse_floor(
            {"width": 5, "height": 5, "border": True, "exits": [[2, 0]]}
        )
        assert geo.is_wall((0, 0))
        assert geo.is_wall((4, 4))
        assert not geo.is_wall((2, 0))
        assert not geo.is_wall((2, 2))

    def test_wall_rects_clamped(self):
        _, geo = parse_floor(
            {"width": 5, "height": 5,
             "wall_rects": [{"x": 3, "y": 3, "width": 10, "height": 10}]}
        )
        assert geo.walls() == [(3, 3), (4, 3), (3, 4), (4, 4)]

    def test_missing_dimensions(self):
        with pytest.raises(ValueError, match="width and height"):
            parse_floor({"floor": 1, "width": 5})

    def test_malformed_cells(self):
        with pytest.raises(ValueError, match="walls"):
            parse_floor({"width": 5, "height": 5, "walls": [[1]]})

    def test_malformed_rect(self):
        with pytest.raises(ValueError, match="wall_rects"):
            parse_floor({"width": 5, "height": 5, "wall_rects": [{"x": 1}]})

    @pytest.mark.parametrize("border", [False, True])
    def test_exit_inside_wall(self, border):
        with pytest.raises(ValueError, match="Floor 3"):
            parse_floor(
                {"floor": 3, "width": 5, "height": 5, "border": border,
                 "walls": [[2, 2]], "exits": [[2, 2]]}
            )

    def test_exit_inside_bordered_wall_rect(self):
        with pytest.raises(ValueError, match="overlap"):
            parse_floor(
                {"width": 6, "height": 6, "border": True, "exits": [[0, 2]],
                 "wall_rects": [{"x": 0, "y": 2, "width": 2, "height": 1}]}
            )


class TestLoadFloorPlans:
    """Whole layout files."""

    def test_loads_floors(self, tmp_path):
        path = _write(tmp_path, {"floors": [
            {"floor": 1, "width": 4, "height": 4, "exits": [[0, 0]]},
            {"floor": 2, "width": 8, "height": 3},
        ]})
        plans = load_floor_plans(path)
        assert plans.floors() == [1, 2]
        assert plans.get(2).bounds() == (8, 3)

    def test_accepts_str_path(self, tmp_path):
        path = _write(tmp_path, {"floors": []})
        assert len(load_floor_plans(str(path))) == 0

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_floor_plans(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="not valid JSON"):
            load_floor_plans(path)

    def test_missing_floors_key(self, tmp_path):
        with pytest.raises(ValueError, match="'floors'"):
            load_floor_plans(_write(tmp_path, {"levels": []}))

    def test_floor_not_an_object(self, tmp_path):
        with pytest.raises(ValueError, match="object"):
            load_floor_plans(_write(tmp_path, {"floors": [[1, 2]]}))

    def test_duplicate_floor(self, tmp_path):
        path = _write(tmp_path, {"floors": [
            {"floor": 1, "width": 4, "height": 4},
            {"floor": 1, "width": 5, "height": 5},
        ]})
        with pytest.raises(ValueError, match="defined twice"):
            load_floor_plans(path)


class TestDemoLayout:
    """The bundled demo building loads and every exit is reachable."""

    def test_demo_loads(self):
        plans = load_floor_plans(DEMO_LAYOUT)
        assert plans.floors() == [1, 2]
        for floor in plans:
            geo = plans.get(floor)
            assert geo.bounds() == (40, 30)
            assert geo.exits()
            for cell in geo.exits():
                assert not geo.is_wall(cell)
