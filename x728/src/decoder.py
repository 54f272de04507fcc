"""
Pure decoder that converts raw X728 register words into physical units.

SMBus delivers each 16-bit register with its bytes swapped relative to the
gauge's big-endian layout, so every conversion starts with
:func:`swap_bytes`.  Results keep full floating point precision; rounding for
display belongs to the publisher.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-003)

TODO:
- None
"""

from __future__ import annotations

from x728.src.registers import CAPACITY_REG, VOLTAGE_REG

CAPACITY_MAX: float = 1.0
"""Upper clamp for the state-of-charge ratio.

The gauge can report slightly above 100 % while charging, so the decoded
ratio is clamped rather than normalised.
"""


def swap_bytes(raw: int) -> int:
    """Swap the high and low bytes of a 16-bit word."""
    raw &= 0xFFFF
    return (raw >> 8) | ((raw & 0xFF) << 8)


def decode_voltage(raw: int) -> float:
    """Convert a raw VCELL word into volts.

    Args:
        raw: Word as returned by ``read_word_data`` (bytes swapped).

    Returns:
        Battery voltage in volts: ``swap(raw) * 1.25 / 1000 / 16``.
    """
    return swap_bytes(raw) * 1.25 / 1000 / 16


def decode_capacity(raw: int) -> float:
    """Convert a raw SOC word into a state-of-charge ratio in [0.0, 1.0].

    Args:
        raw: Word as returned by ``read_word_data`` (bytes swapped).

    Returns:
        ``swap(raw) / 256 / 100``, clamped to :data:`CAPACITY_MAX`.
    """
    return min(swap_bytes(raw) / 256 / 100, CAPACITY_MAX)


_DECODERS = {
    VOLTAGE_REG.address: decode_voltage,
    CAPACITY_REG.address: decode_capacity,
}


def decode(register: int, raw: int) -> float:
    """Decode *raw* according to the register offset it was read from.

    Raises:
        KeyError: If *register* is not a known X728 register.
    """
    return _DECODERS[register](raw)
