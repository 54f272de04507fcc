"""
Debounced watcher for the X728 external power loss line.

The X728 drives GPIO 6 high while running on battery.  The line is opened as
a gpiozero :class:`~gpiozero.DigitalInputDevice` with a bounce window, and
both edges are delivered to a single callback as a boolean level
(``True`` = external power lost).

gpiozero invokes edge callbacks on its own background thread; callers that
need to touch event loop state must marshal the call themselves.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-006)

TODO:
- None
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from gpiozero import DigitalInputDevice, GPIOZeroError

from x728.src.errors import WatchError
from x728.src.registers import DEFAULT_DEBOUNCE_MS, POWER_LOSS_PIN

logger = logging.getLogger(__name__)


class PowerEdgeWatcher:
    """Owns the power loss input line between :meth:`open` and :meth:`close`.

    Args:
        pin: BCM GPIO number of the power loss line.
        debounce_ms: Bounce suppression window in milliseconds.  ``0``
            disables debouncing.
    """

    def __init__(
        self,
        *,
        pin: int = POWER_LOSS_PIN,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    ) -> None:
        self._pin = pin
        self._debounce_ms = debounce_ms
        self._device: DigitalInputDevice | None = None

    def open(self) -> None:
        """Claim the GPIO line.

        Raises:
            WatchError: If the line cannot be claimed.
        """
        if self._device is not None:
            return
        bounce_time = self._debounce_ms / 1000.0 if self._debounce_ms > 0 else None
        try:
            self._device = DigitalInputDevice(
                self._pin,
                pull_up=False,
                bounce_time=bounce_time,
            )
        except (GPIOZeroError, OSError) as exc:
            raise WatchError(f"Failed to open GPIO {self._pin}: {exc}") from exc
        logger.info(
            "Watching GPIO %d for power loss (debounce=%dms)",
            self._pin,
            self._debounce_ms,
        )

    def read(self) -> bool:
        """Return the current level; ``True`` means external power is lost.

        Raises:
            WatchError: If the line is not open or cannot be read.
        """
        device = self._require_device()
        try:
            return bool(device.is_active)
        except (GPIOZeroError, OSError) as exc:
            raise WatchError(f"Failed to read GPIO {self._pin}: {exc}") from exc

    def watch(self, callback: Callable[[bool], None]) -> None:
        """Invoke ``callback(level)`` once per debounced edge in either direction.

        Raises:
            WatchError: If the line is not open or edge detection fails.
        """
        device = self._require_device()
        try:
            device.when_activated = lambda: callback(True)
            device.when_deactivated = lambda: callback(False)
        except (GPIOZeroError, OSError) as exc:
            raise WatchError(f"Failed to watch GPIO {self._pin}: {exc}") from exc

    def close(self) -> None:
        """Release the GPIO line.  Safe to call more than once."""
        device, self._device = self._device, None
        if device is None:
            return
        device.when_activated = None
        device.when_deactivated = None
        device.close()
        logger.info("Released GPIO %d", self._pin)

    def _require_device(self) -> DigitalInputDevice:
        if self._device is None:
            raise WatchError(f"GPIO {self._pin} is not open")
        return self._device
