"""
External power notification state machine.

Turns the power loss line into Signal K notifications with two states:

    line high (power lost)     -> alert,  "External power loss; Running on battery."
    line low  (power present)  -> normal, "External power restored; Charging battery."

The line is read once synchronously at start so the first notification
reflects the real state immediately; after that every debounced edge
publishes exactly one fresh record, even if the state did not change.

A failure to open or watch the line disables notifications only; it is
reported once and the poll loop keeps running.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-009)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from x728.src.errors import WatchError
from x728.src.models import (
    POWER_LOST_MESSAGE,
    POWER_RESTORED_MESSAGE,
    NotificationRecord,
    PowerState,
)

if TYPE_CHECKING:
    from x728.src.gpio import PowerEdgeWatcher
    from x728.src.health import HealthWriter
    from x728.src.publisher import TelemetryPublisher

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATION_PATH = "notifications.electrical.x728.status"


def make_notification(path: str, power_lost: bool) -> NotificationRecord:
    """Build the notification for a line level.  Pure."""
    if power_lost:
        return NotificationRecord(
            path=path, state=PowerState.ALERT, message=POWER_LOST_MESSAGE
        )
    return NotificationRecord(
        path=path, state=PowerState.NORMAL, message=POWER_RESTORED_MESSAGE
    )


class EdgeNotifier:
    """Wires a PowerEdgeWatcher to the publisher.

    Args:
        watcher: The power loss line watcher.  Owned by the notifier
            between :meth:`start` and :meth:`stop`.
        publisher: Sink for notification records and errors.
        path: Signal K notification path.
        health: HealthWriter instance, or None to skip health writes.
    """

    def __init__(
        self,
        *,
        watcher: PowerEdgeWatcher,
        publisher: TelemetryPublisher,
        path: str = DEFAULT_NOTIFICATION_PATH,
        health: HealthWriter | None = None,
    ) -> None:
        self._watcher = watcher
        self._publisher = publisher
        self._path = path
        self._health = health
        self._loop: asyncio.AbstractEventLoop | None = None
        self._active = False

    @property
    def active(self) -> bool:
        """True while edges are being turned into notifications."""
        return self._active

    async def start(self) -> bool:
        """Open the line, publish the current state, then watch for edges.

        Returns:
            True if notifications are active, False if the line could not
            be monitored (the error has already been reported).
        """
        if self._active:
            return True
        self._loop = asyncio.get_running_loop()

        try:
            await asyncio.to_thread(self._watcher.open)
            power_lost = await asyncio.to_thread(self._watcher.read)
        except WatchError as exc:
            self._disable(exc)
            return False

        self._publish(power_lost)

        try:
            self._watcher.watch(self._on_edge)
        except WatchError as exc:
            self._disable(exc)
            return False

        self._active = True
        return True

    def stop(self) -> None:
        """Stop notifications and release the line.  Idempotent."""
        self._active = False
        self._watcher.close()

    def _on_edge(self, power_lost: bool) -> None:
        """Edge callback; runs on the GPIO library's thread."""
        loop = self._loop
        if not self._active or loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._handle_edge, power_lost)

    def _handle_edge(self, power_lost: bool) -> None:
        if not self._active:
            return
        try:
            self._publish(power_lost)
        except Exception:
            logger.error("Power notification error", exc_info=True)

    def _publish(self, power_lost: bool) -> None:
        record = make_notification(self._path, power_lost)
        if power_lost:
            logger.info("External power loss, running on battery")
        else:
            logger.info("External power restored, battery charging")
        self._publisher.publish_notification(record)
        if self._health is not None:
            try:
                self._health.set_power_state(record.state.value)
            except OSError:
                logger.warning("Failed to write health file", exc_info=True)

    def _disable(self, exc: WatchError) -> None:
        self._active = False
        self._watcher.close()
        self._publisher.report_error(f"Power notifications disabled: {exc}")
        if self._health is not None:
            try:
                self._health.record_error(str(exc))
            except OSError:
                logger.warning("Failed to write health file", exc_info=True)
