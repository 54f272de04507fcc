"""
Telemetry publishing for the X728 edge daemon.

Defines the :class:`TelemetryPublisher` protocol the poll loop and edge
notifier depend on, and :class:`SignalKStreamPublisher`, which writes one
Signal K delta per line to a text stream.  Pointing a Signal K server's
"execute" data provider at the daemon makes those lines flow straight into
the server's data model.

Stdout carries deltas only; logs go to stderr (see :mod:`x728.src.main`).

CHANGELOG:
- 2026-10-18: Add optional rounding of published values (STORY-012)
- 2026-10-18: Initial creation (STORY-007)

TODO:
- None
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol, TextIO

from x728.src.models import Delta, PathValue, Update

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from x728.src.models import NotificationRecord

logger = logging.getLogger(__name__)


class TelemetryPublisher(Protocol):
    """Sink for everything the daemon produces."""

    def publish_value(self, path: str, value: float) -> None:
        """Publish one timestamped value at *path*."""

    def publish_meta(self, units_by_path: Mapping[str, str]) -> None:
        """Announce the units of each path."""

    def publish_notification(self, record: NotificationRecord) -> None:
        """Publish a notification record at ``record.path``."""

    def report_error(self, message: str) -> None:
        """Surface a non-fatal error to the host."""


class SignalKStreamPublisher:
    """Writes Signal K deltas as JSON lines.

    Args:
        stream: Destination text stream.  Defaults to ``sys.stdout``.
        source_label: Value of each update's ``$source`` field.
        decimals: If set, numeric values are rounded to this many decimal
            places just before they are written.
        clock: Returns the timestamp for value and notification updates.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        *,
        source_label: str = "x728",
        decimals: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self._source_label = source_label
        self._decimals = decimals
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self.last_error: str | None = None

    def publish_value(self, path: str, value: float) -> None:
        if self._decimals is not None:
            value = round(value, self._decimals)
        self._write_values([PathValue(path=path, value=value)])

    def publish_meta(self, units_by_path: Mapping[str, str]) -> None:
        meta = [
            PathValue(path=path, value={"units": units})
            for path, units in units_by_path.items()
        ]
        self._write(Delta(updates=[Update(meta=meta)]))

    def publish_notification(self, record: NotificationRecord) -> None:
        value = {
            "state": record.state.value,
            "method": [method.value for method in record.methods],
            "message": record.message,
        }
        self._write_values([PathValue(path=record.path, value=value)])

    def report_error(self, message: str) -> None:
        self.last_error = message
        logger.error("%s", message)

    def _write_values(self, values: list[PathValue]) -> None:
        update = Update(
            source=self._source_label,
            timestamp=self._clock(),
            values=values,
        )
        self._write(Delta(updates=[update]))

    def _write(self, delta: Delta) -> None:
        line = delta.model_dump_json(by_alias=True, exclude_none=True)
        self._stream.write(line + "\n")
        self._stream.flush()
