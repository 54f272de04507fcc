"""
Unit tests for the edge health writer module.

Tests verify:
- record_poll() writes health.json with last_poll_ts and decoded values.
- Registers missing from a poll keep their previous value.
- set_power_state() and record_error() update their fields.
- Health file always contains every field.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-011)

TODO:
- None
"""

from __future__ import annotations

import json
from pathlib import Path

from x728.src.health import HealthWriter

_ALL_FIELDS = {
    "last_poll_ts",
    "voltage",
    "capacity",
    "power_state",
    "last_error",
    "last_error_ts",
}


class TestRecordPoll:
    def test_record_poll_writes_health_file(self, tmp_path: Path) -> None:
        """Calling record_poll() creates health.json with last_poll_ts set."""
        health_path = tmp_path / "health.json"
        writer = HealthWriter(health_path)

        writer.record_poll({"voltage": 4.1, "capacity": 0.9})

        data = json.loads(health_path.read_text())
        assert set(data) == _ALL_FIELDS
        assert "T" in data["last_poll_ts"]
        assert data["voltage"] == 4.1
        assert data["capacity"] == 0.9

    def test_missing_register_keeps_previous_value(self, tmp_path: Path) -> None:
        health_path = tmp_path / "health.json"
        writer = HealthWriter(health_path)

        writer.record_poll({"voltage": 4.1, "capacity": 0.9})
        writer.record_poll({"voltage": 4.0})

        data = json.loads(health_path.read_text())
        assert data["voltage"] == 4.0
        assert data["capacity"] == 0.9

    def test_accepts_str_path(self, tmp_path: Path) -> None:
        health_path = tmp_path / "health.json"
        writer = HealthWriter(str(health_path))

        writer.record_poll({})

        assert writer.path == health_path
        assert json.loads(health_path.read_text())["voltage"] is None


class TestPowerStateAndErrors:
    def test_set_power_state(self, tmp_path: Path) -> None:
        health_path = tmp_path / "health.json"
        writer = HealthWriter(health_path)

        writer.set_power_state("alert")

        data = json.loads(health_path.read_text())
        assert data["power_state"] == "alert"
        assert data["last_poll_ts"] is None

    def test_record_error(self, tmp_path: Path) -> None:
        health_path = tmp_path / "health.json"
        writer = HealthWriter(health_path)

        writer.record_error("Failed to open I2C bus 1")

        data = json.loads(health_path.read_text())
        assert data["last_error"] == "Failed to open I2C bus 1"
        assert data["last_error_ts"] is not None

    def test_fields_survive_other_updates(self, tmp_path: Path) -> None:
        health_path = tmp_path / "health.json"
        writer = HealthWriter(health_path)

        writer.record_error("boom")
        writer.set_power_state("normal")
        writer.record_poll({"voltage": 3.9})

        data = json.loads(health_path.read_text())
        assert data["last_error"] == "boom"
        assert data["power_state"] == "normal"
        assert data["voltage"] == 3.9
