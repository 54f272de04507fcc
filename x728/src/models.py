"""
Data models for the X728 edge daemon.

Immutable configuration values (DeviceAddress, PollConfig), the power state
notification record, and the pydantic models for the Signal K delta messages
written by the publisher.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-004)

TODO:
- None
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from x728.src.errors import ConfigError
from x728.src.registers import DEFAULT_I2C_ADDRESS, MAX_I2C_ADDRESS

# ---------------------------------------------------------------------------
# Configuration values
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DeviceAddress:
    """An I2C peripheral location.

    Attributes:
        bus_id: I2C bus number (``/dev/i2c-<bus_id>``).
        address: 7-bit peripheral address.
    """

    bus_id: int
    address: int = DEFAULT_I2C_ADDRESS

    def __post_init__(self) -> None:  # noqa: D105
        if self.bus_id < 0:
            raise ConfigError(f"I2C bus id must be >= 0 (got {self.bus_id})")
        if not 0 < self.address <= MAX_I2C_ADDRESS:
            raise ConfigError(
                f"I2C address {self.address:#x} is not a 7-bit address"
            )

    @classmethod
    def parse(cls, bus_id: int, text: str | None) -> DeviceAddress:
        """Build a DeviceAddress from a configured address string.

        Accepts any base prefix ``int(text, 0)`` understands (``"0x36"``,
        ``"54"``, ``"0o66"``).  An unset, blank, or zero address falls back
        to :data:`DEFAULT_I2C_ADDRESS`.

        Raises:
            ConfigError: If *text* is not a number or is outside 7 bits.
        """
        if text is None or not text.strip():
            return cls(bus_id=bus_id)
        try:
            address = int(text.strip(), 0)
        except ValueError:
            raise ConfigError(f"I2C address {text!r} is not a number") from None
        if address == 0:
            return cls(bus_id=bus_id)
        return cls(bus_id=bus_id, address=address)


@dataclass(frozen=True, slots=True)
class PollConfig:
    """Poll loop configuration, fixed for the lifetime of one run.

    Attributes:
        rate_s: Seconds between poll cycles.
        path_voltage: Signal K path for the battery voltage.
        path_capacity: Signal K path for the state of charge.
        device: Fuel gauge location on the I2C bus.
    """

    rate_s: float
    path_voltage: str
    path_capacity: str
    device: DeviceAddress

    def __post_init__(self) -> None:  # noqa: D105
        if not self.rate_s > 0:
            raise ConfigError(f"Poll rate must be > 0 seconds (got {self.rate_s})")
        if not self.path_voltage or not self.path_capacity:
            raise ConfigError("Voltage and capacity paths must not be empty")


# ---------------------------------------------------------------------------
# Power state notification
# ---------------------------------------------------------------------------


class PowerState(StrEnum):
    """External power condition as a Signal K notification state."""

    NORMAL = "normal"
    ALERT = "alert"


class AlertMethod(StrEnum):
    """Signal K notification presentation methods."""

    VISUAL = "visual"
    SOUND = "sound"


POWER_LOST_MESSAGE = "External power loss; Running on battery."
POWER_RESTORED_MESSAGE = "External power restored; Charging battery."


class NotificationRecord(BaseModel):
    """A single power state notification, built fresh for every edge.

    Attributes:
        path: Signal K notification path.
        state: ``alert`` on power loss, ``normal`` on power restored.
        message: Human readable text matching the state.
        methods: How the host should present the notification.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    state: PowerState
    message: str
    methods: tuple[AlertMethod, ...] = (AlertMethod.VISUAL, AlertMethod.SOUND)


# ---------------------------------------------------------------------------
# Signal K delta messages
# ---------------------------------------------------------------------------


class PathValue(BaseModel):
    """One ``{"path": ..., "value": ...}`` entry of a delta update."""

    path: str
    value: float | dict[str, Any]


class Update(BaseModel):
    """One entry of a delta's ``updates`` list.

    Either ``values`` or ``meta`` is set, never both.
    """

    source: str | None = Field(default=None, serialization_alias="$source")
    timestamp: datetime | None = None
    values: list[PathValue] | None = None
    meta: list[PathValue] | None = None


class Delta(BaseModel):
    """A Signal K delta message."""

    updates: list[Update]
