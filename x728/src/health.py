"""
Health file writer for the X728 edge daemon.

Writes a JSON status file at a configurable path with:
- last_poll_ts: ISO timestamp of the most recent poll cycle.
- voltage / capacity: most recently decoded values (null until first read).
- power_state: ``normal`` or ``alert`` (null until the line is read).
- last_error / last_error_ts: most recent reported error, if any.

The file is rewritten on every state change, giving the host a plugin
status that survives log rotation.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-011)

TODO:
- None
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path


class HealthWriter:
    """Writes daemon status to a JSON file.

    Each mutating method updates the in-memory state and immediately
    rewrites the health file so it always reflects the latest status.

    Args:
        path: Filesystem path for the health JSON file. Accepts str or Path.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._last_poll_ts: str | None = None
        self._values: dict[str, float | None] = {"voltage": None, "capacity": None}
        self._power_state: str | None = None
        self._last_error: str | None = None
        self._last_error_ts: str | None = None

    def record_poll(self, values: dict[str, float]) -> None:
        """Record a poll cycle and the values it decoded.

        Args:
            values: Register name to decoded value.  Registers that failed
                this cycle are absent and keep their previous value.
        """
        self._last_poll_ts = _now()
        self._values.update(values)
        self._write()

    def set_power_state(self, state: str) -> None:
        """Update the external power state and write health file."""
        self._power_state = state
        self._write()

    def record_error(self, message: str) -> None:
        """Record the most recent error and write health file."""
        self._last_error = message
        self._last_error_ts = _now()
        self._write()

    def _write(self) -> None:
        """Write the health JSON file with current state."""
        data = {
            "last_poll_ts": self._last_poll_ts,
            **self._values,
            "power_state": self._power_state,
            "last_error": self._last_error,
            "last_error_ts": self._last_error_ts,
        }
        self.path.write_text(json.dumps(data))


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()
