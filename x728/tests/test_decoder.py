"""
Tests for the register decoder -- converts raw X728 words to volts and ratio.

Verifies the byte swap, the known voltage and capacity vectors, linearity and
monotonicity of the voltage conversion, and the capacity clamp.

CHANGELOG:
- 2026-10-18: Initial creation -- TDD tests written first (STORY-003)

TODO:
- None
"""

from __future__ import annotations

import pytest
from x728.src.decoder import (
    CAPACITY_MAX,
    decode,
    decode_capacity,
    decode_voltage,
    swap_bytes,
)
from x728.src.registers import CAPACITY_REG, VOLTAGE_REG


def _raw_for(swapped: int) -> int:
    """Return the on-the-wire word that swaps to *swapped*."""
    return swap_bytes(swapped)


class TestSwapBytes:
    def test_swaps_high_and_low_byte(self) -> None:
        assert swap_bytes(0x1027) == 0x2710

    def test_is_an_involution(self) -> None:
        for raw in (0x0000, 0x00FF, 0xFF00, 0x1234, 0xFFFF):
            assert swap_bytes(swap_bytes(raw)) == raw

    def test_ignores_bits_above_16(self) -> None:
        assert swap_bytes(0x1_1027) == 0x2710


class TestDecodeVoltage:
    def test_known_vector(self) -> None:
        """0x1027 as received swaps to 10000 -> 0.78125 V."""
        assert decode_voltage(0x1027) == pytest.approx(0.78125)

    def test_zero(self) -> None:
        assert decode_voltage(0) == 0.0

    def test_typical_full_cell(self) -> None:
        # 4.2 V = 53760 counts of 1.25/16 mV
        assert decode_voltage(_raw_for(53760)) == pytest.approx(4.2)

    def test_linear_in_swapped_value(self) -> None:
        step = decode_voltage(_raw_for(1))
        for swapped in (0, 1, 255, 256, 10000, 0xFFFF):
            assert decode_voltage(_raw_for(swapped)) == pytest.approx(swapped * step)

    def test_monotonic_in_swapped_value(self) -> None:
        values = [decode_voltage(_raw_for(s)) for s in range(0, 0x10000, 97)]
        assert values == sorted(values)

    def test_keeps_full_precision(self) -> None:
        assert decode_voltage(_raw_for(1)) == 1.25 / 1000 / 16


class TestDecodeCapacity:
    def test_boundary_is_exactly_one(self) -> None:
        """swapped 25600 -> 25600 / 256 / 100 = 1.0, not exceeded."""
        assert decode_capacity(_raw_for(25600)) == 1.0

    def test_half_charge(self) -> None:
        assert decode_capacity(_raw_for(12800)) == pytest.approx(0.5)

    def test_clamps_overshoot(self) -> None:
        assert decode_capacity(_raw_for(25601)) == CAPACITY_MAX
        assert decode_capacity(0xFFFF) == CAPACITY_MAX

    def test_always_within_unit_interval(self) -> None:
        for raw in range(0, 0x10000, 13):
            assert 0.0 <= decode_capacity(raw) <= 1.0

    def test_byte_order_matters(self) -> None:
        # 0x0064 on the wire is 0x6400 = 25600 after the swap
        assert decode_capacity(0x0064) == 1.0


class TestDecodeDispatch:
    def test_dispatches_by_register(self) -> None:
        assert decode(VOLTAGE_REG.address, 0x1027) == decode_voltage(0x1027)
        assert decode(CAPACITY_REG.address, 0x0032) == decode_capacity(0x0032)

    def test_unknown_register_raises(self) -> None:
        with pytest.raises(KeyError):
            decode(0x0C, 0)
