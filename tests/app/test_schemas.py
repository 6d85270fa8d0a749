"""Unit tests for inbound message schemas and settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.config import Settings
from app.schemas import DEFAULT_FLOOR, HazardClear, HazardToggle, PositionReport
from evac.occupants import Intent, Role

pytestmark = pytest.mark.unit


class TestPositionReport:
    """update_occupant payload."""

    def test_minimal(self):
        report = PositionReport.model_validate({"x": 1, "y": 2})
        assert report.floor == DEFAULT_FLOOR
        assert report.role is Role.CIVILIAN
        assert report.intent is None

    def test_null_floor_and_role(self):
        report = PositionReport.model_validate({"x": 1, "y": 2, "floor": None, "role": None})
        assert report.floor == 1
        assert report.role is Role.CIVILIAN

    def test_full(self):
        report = PositionReport.model_validate(
            {"x": 1, "y": 2, "floor": 3, "role": "responder", "intent": "seek-hazard"}
        )
        assert report.role is Role.RESPONDER
        assert report.intent is Intent.SEEK_HAZARD

    def test_extra_keys_ignored(self):
        report = PositionReport.model_validate({"type": "update_occupant", "x": 0, "y": 0})
        assert (report.x, report.y) == (0, 0)

    def test_missing_y(self):
        with pytest.raises(ValidationError):
            PositionReport.model_validate({"x": 1})

    def test_unknown_role(self):
        with pytest.raises(ValidationError):
            PositionReport.model_validate({"x": 1, "y": 1, "role": "mascot"})


class TestHazardMessages:
    """toggle_hazard and clear_hazards payloads."""

    def test_toggle_defaults_floor(self):
        assert HazardToggle.model_validate({"x": 4, "y": 5}).floor == 1

    def test_toggle_requires_cell(self):
        with pytest.raises(ValidationError):
            HazardToggle.model_validate({"y": 5})

    def test_clear_defaults_floor(self):
        assert HazardClear().floor == 1
        assert HazardClear.model_validate({"floor": None}).floor == 1

    def test_clear_floor(self):
        assert HazardClear.model_validate({"floor": 4}).floor == 4


class TestSettings:
    """Environment-driven settings."""

    def test_defaults(self, monkeypatch):
        for var in ("PORT", "HOST", "FLOOR_LAYOUT", "LOG_LEVEL", "DEBUG"):
            monkeypatch.delenv(var, raising=False)
        s = Settings(_env_file=None)
        assert s.app_name == "EVACROUTE"
        assert s.host == "0.0.0.0"
        assert s.port == 3000
        assert s.floor_layout == ""
        assert s.debug is False

    def test_port_from_env(self, monkeypatch):
        monkeypatch.setenv("PORT", "8123")
        assert Settings(_env_file=None).port == 8123

    def test_env_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("floor_layout", "layouts/demo.json")
        assert Settings(_env_file=None).floor_layout == "layouts/demo.json"
