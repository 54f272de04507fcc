"""
Geekworm X728 register map -- single source of truth.

The X728 carries a MAX17040-style fuel gauge on I2C (default bus 1, address
0x36).  Two 16-bit registers are read each poll cycle: VCELL (battery
voltage) and SOC (state of charge).  The gauge stores both big-endian while
SMBus ``read_word_data`` returns little-endian words, so every raw word must be
byte-swapped before scaling (see :mod:`x728.src.decoder`).

The board also drives GPIO 6 high when external power is lost.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-002)

TODO:
- None
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Bus and pin defaults
# ---------------------------------------------------------------------------

DEFAULT_I2C_BUS: int = 1
"""Raspberry Pi user I2C bus."""

DEFAULT_I2C_ADDRESS: int = 0x36
"""Fuel gauge address used when the configured address is unset or zero."""

MAX_I2C_ADDRESS: int = 0x7F
"""Largest valid 7-bit I2C address."""

POWER_LOSS_PIN: int = 6
"""GPIO line the X728 drives high on external power loss."""

DEFAULT_DEBOUNCE_MS: int = 100
"""Contact bounce suppression window for the power loss line."""

# ---------------------------------------------------------------------------
# Register definitions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RegisterDef:
    """Definition of a single fuel gauge register.

    Attributes:
        address: Register offset on the peripheral.
        name: Unique identifier, also used as the health file key.
        unit: Signal K unit string announced in the metadata delta.
        description: Free-text description of the register.
    """

    address: int
    name: str
    unit: str
    description: str = ""

    def __post_init__(self) -> None:  # noqa: D105
        if not 0 <= self.address <= 0xFF:
            msg = f"Register '{self.name}': offset {self.address:#x} is not a byte"
            raise ValueError(msg)


VOLTAGE_REG = RegisterDef(
    address=0x02,
    name="voltage",
    unit="V",
    description="VCELL: battery voltage, 1.25 mV per LSB in the upper 12 bits",
)

CAPACITY_REG = RegisterDef(
    address=0x04,
    name="capacity",
    unit="ratio",
    description="SOC: state of charge, 1/256 percent per LSB",
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

ALL_REGISTERS: tuple[RegisterDef, ...] = (VOLTAGE_REG, CAPACITY_REG)
"""Registers in read order: voltage first, then capacity."""
