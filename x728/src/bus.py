"""
Async I2C bus reader for the X728 fuel gauge.

Wraps :class:`smbus2.SMBus` behind an open / read_word / close contract.
smbus2 is blocking, so every call runs in a worker thread via
:func:`asyncio.to_thread` and never stalls the event loop.  Transport
failures are translated into the daemon's bus error taxonomy so the poll loop
can report them per call without aborting the rest of the cycle.

The handle is deliberately short-lived: the poll loop opens the bus, reads
both registers, and closes it again on every cycle.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-005)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging

from smbus2 import SMBus

from x728.src.errors import BusCloseError, BusOpenError, BusReadError

logger = logging.getLogger(__name__)


class BusReader:
    """Async facade over smbus2 for one bus at a time.

    The reader itself holds no state; each :meth:`open` returns an
    independent handle that the caller must pass to :meth:`close`.
    """

    async def open(self, bus_id: int) -> SMBus:
        """Claim ``/dev/i2c-<bus_id>``.

        Raises:
            BusOpenError: If the bus device cannot be opened.
        """
        try:
            return await asyncio.to_thread(SMBus, bus_id)
        except (OSError, ValueError) as exc:
            raise BusOpenError(f"Failed to open I2C bus {bus_id}: {exc}") from exc

    async def read_word(self, handle: SMBus, address: int, register: int) -> int:
        """Read one raw 16-bit word from *register* on the peripheral.

        Raises:
            BusReadError: On transport failure or NACK.
        """
        try:
            raw = await asyncio.to_thread(handle.read_word_data, address, register)
        except OSError as exc:
            raise BusReadError(
                f"Failed to read register {register:#04x} "
                f"from device {address:#04x}: {exc}"
            ) from exc
        logger.debug(
            "Read register %#04x from device %#04x: raw=%#06x", register, address, raw
        )
        return raw

    async def close(self, handle: SMBus) -> None:
        """Release the bus handle.

        Raises:
            BusCloseError: If the underlying file descriptor fails to close.
        """
        try:
            await asyncio.to_thread(handle.close)
        except OSError as exc:
            raise BusCloseError(f"Failed to close I2C bus: {exc}") from exc
