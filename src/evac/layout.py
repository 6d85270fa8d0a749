"""Load floor geometry from a JSON layout file.

Layout format
-------------
::

    {"floors": [
        {"floor": 1, "width": 40, "height": 30, "border": true,
         "walls": [[x, y], ...],
         "wall_rects": [{"x": 2, "y": 6, "width": 16, "height": 2}],
         "exits": [[20, 1], [20, 28]]}
    ]}

``border`` rings the floor with walls, leaving exit cells open.
Rectangles are clamped to the grid.  The loader is stateless: it reads a
file and returns a FloorPlans, nothing is cached.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from evac.geometry import Cell, FloorGeometry, FloorPlans


def _cells(raw: list, what: str, floor: int) -> list[Cell]:
    try:
        return [(int(c[0]), int(c[1])) for c in raw]
    except (TypeError, ValueError, IndexError):
        raise ValueError(f"Floor {floor}: {what} must be a list of [x, y] pairs") from None


def _rect_cells(rect: dict, width: int, height: int, floor: int) -> list[Cell]:
    try:
        x, y = int(rect["x"]), int(rect["y"])
        w, h = int(rect["width"]), int(rect["height"])
    except (KeyError, TypeError, ValueError):
        raise ValueError(f"Floor {floor}: wall_rects entries need x, y, width, height") from None
    x_end, y_end = min(x + w, width), min(y + h, height)
    return [(cx, cy) for cx in range(max(0, x), x_end) for cy in range(max(0, y), y_end)]


def parse_floor(data: dict) -> tuple[int, FloorGeometry]:
    """Build one floor's geometry from its layout dict."""
    floor = data.get("floor", 1)
    try:
        floor = int(floor)
        width, height = int(data["width"]), int(data["height"])
    except (KeyError, TypeError, ValueError):
        raise ValueError(f"Floor {floor!r}: floor, width and height must be integers") from None

    walls = _cells(data.get("walls", []), "walls", floor)
    for rect in data.get("wall_rects", []):
        walls.extend(_rect_cells(rect, width, height, floor))
    exits = _cells(data.get("exits", []), "exits", floor)

    try:
        if data.get("border", False):
            geometry = FloorGeometry.bordered(width, height, exits=exits, walls=walls)
        else:
            geometry = FloorGeometry(width, height, walls=walls, exits=exits)
    except ValueError as e:
        raise ValueError(f"Floor {floor}: {e}") from None
    return floor, geometry


def load_floor_plans(path: Union[str, Path]) -> FloorPlans:
    """Read a layout file into FloorPlans.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the document is not a valid layout.
    """
    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Layout {path} is not valid JSON: {e}") from None

    if not isinstance(data, dict) or not isinstance(data.get("floors"), list):
        raise ValueError(f"Layout {path} must be an object with a 'floors' list")

    plans = FloorPlans()
    for entry in data["floors"]:
        if not isinstance(entry, dict):
            raise ValueError(f"Layout {path}: every floor must be an object")
        floor, geometry = parse_floor(entry)
        if floor in plans:
            raise ValueError(f"Layout {path}: floor {floor} defined twice")
        plans.replace(floor, geometry)
    return plans
