"""
Edge daemon configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
All configuration values come from environment variables or .env files;
every value has a default matching a stock X728 on a Raspberry Pi.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-001)

TODO:
- None
"""

from __future__ import annotations

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings

from x728.src.errors import ConfigError
from x728.src.models import DeviceAddress, PollConfig
from x728.src.notifier import DEFAULT_NOTIFICATION_PATH
from x728.src.registers import (
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_I2C_BUS,
    POWER_LOSS_PIN,
)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class X728Settings(BaseSettings):
    """Edge daemon configuration for the X728 UPS board.

    Attributes:
        poll_rate_s: Seconds between fuel gauge poll cycles (must be > 0).
        path_voltage: Signal K path for battery voltage.
        path_capacity: Signal K path for battery state of charge.
        i2c_bus: I2C bus number (default 1).
        i2c_address: Fuel gauge address as text, e.g. ``"0x36"``.  Blank or
            zero falls back to 0x36.
        gpio_pin: BCM GPIO number of the power loss line (default 6).
        debounce_ms: Bounce window for the power loss line.
        notifications_enabled: Publish power loss notifications.
        notification_path: Signal K path for power notifications.
        source_label: ``$source`` label attached to every update.
        value_decimals: Round published values to this many decimals.
            Unset publishes full precision.
        health_path: Health JSON file path.  Unset disables the file.
        log_level: Root log level name.
    """

    poll_rate_s: float = 10
    path_voltage: str = "electrical.batteries.rpi.voltage"
    path_capacity: str = "electrical.batteries.rpi.capacity.stateOfCharge"
    i2c_bus: int = DEFAULT_I2C_BUS
    i2c_address: str = "0x36"
    gpio_pin: int = POWER_LOSS_PIN
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    notifications_enabled: bool = True
    notification_path: str = DEFAULT_NOTIFICATION_PATH
    source_label: str = "x728"
    value_decimals: int | None = None
    health_path: str | None = None
    log_level: str = "INFO"

    @field_validator("poll_rate_s")
    @classmethod
    def poll_rate_must_be_positive(cls, v: float) -> float:
        """Validate the poll rate is a positive number of seconds."""
        if v <= 0:
            raise ValueError("POLL_RATE_S must be > 0")
        return v

    @field_validator("path_voltage", "path_capacity", "notification_path")
    @classmethod
    def path_must_not_be_empty(cls, v: str) -> str:
        """Validate Signal K paths are non-empty."""
        v = v.strip()
        if not v:
            raise ValueError("Signal K paths must not be empty")
        return v

    @field_validator("i2c_bus", "gpio_pin", "debounce_ms")
    @classmethod
    def must_be_non_negative(cls, v: int) -> int:
        """Validate bus, pin and debounce values are non-negative."""
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("i2c_address")
    @classmethod
    def i2c_address_must_be_7_bit(cls, v: str) -> str:
        """Validate the address parses as a 7-bit I2C address."""
        try:
            DeviceAddress.parse(0, v)
        except ConfigError as exc:
            raise ValueError(str(exc)) from None
        return v

    @field_validator("value_decimals")
    @classmethod
    def value_decimals_must_be_valid(cls, v: int | None) -> int | None:
        """Validate rounding precision is between 0 and 6."""
        if v is not None and not 0 <= v <= 6:
            raise ValueError("VALUE_DECIMALS must be between 0 and 6")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        """Validate the log level is a standard logging level name."""
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return level

    def poll_config(self) -> PollConfig:
        """Build the immutable poll loop configuration."""
        return PollConfig(
            rate_s=self.poll_rate_s,
            path_voltage=self.path_voltage,
            path_capacity=self.path_capacity,
            device=DeviceAddress.parse(self.i2c_bus, self.i2c_address),
        )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


def load_settings() -> X728Settings:
    """Load settings from the environment.

    Raises:
        ConfigError: If any value fails validation.
    """
    try:
        return X728Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
