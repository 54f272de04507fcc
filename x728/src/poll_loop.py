"""
Periodic fuel gauge poll loop.

On :meth:`PollLoop.start` the loop announces the units of both configured
paths once, runs one poll cycle immediately, and then polls on a fixed-rate
grid every ``rate_s`` seconds until :meth:`PollLoop.stop` is called.

Every cycle follows the same bus discipline:

    open bus -> read voltage -> read capacity -> close bus

The two reads are independent (a failed voltage read still attempts the
capacity read), the bus is always closed once it was opened, and every bus
error is reported and then dropped.  Nothing raised inside a cycle reaches
the scheduler: the next tick is the retry.

Cycles never overlap.  When a cycle outlasts one or more ticks the missed
ticks are skipped instead of being run back to back.

CHANGELOG:
- 2026-10-18: Skip overrun ticks instead of bunching cycles (STORY-010)
- 2026-10-18: Initial creation (STORY-008)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from x728.src.decoder import decode
from x728.src.errors import BusCloseError, BusOpenError, BusReadError
from x728.src.registers import CAPACITY_REG, VOLTAGE_REG

if TYPE_CHECKING:
    from x728.src.bus import BusReader
    from x728.src.health import HealthWriter
    from x728.src.models import PollConfig
    from x728.src.publisher import TelemetryPublisher

logger = logging.getLogger(__name__)


class PollLoop:
    """Owns the recurring poll schedule for one X728 board.

    Args:
        bus: Bus reader used for every cycle.
        publisher: Sink for decoded values, metadata and errors.
        health: HealthWriter instance, or None to skip health writes.
    """

    def __init__(
        self,
        *,
        bus: BusReader,
        publisher: TelemetryPublisher,
        health: HealthWriter | None = None,
    ) -> None:
        self._bus = bus
        self._publisher = publisher
        self._health = health
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        """True while the recurring schedule is active."""
        return self._task is not None and not self._task.done()

    async def start(self, config: PollConfig) -> None:
        """Announce units, poll once, then schedule the recurring cycles.

        Raises:
            RuntimeError: If the loop is already running.
        """
        if self.running:
            raise RuntimeError("Poll loop is already running")

        self._stop_event = asyncio.Event()
        self._publisher.publish_meta(
            {
                config.path_voltage: VOLTAGE_REG.unit,
                config.path_capacity: CAPACITY_REG.unit,
            }
        )

        await self._safe_poll(config)

        if self._stop_event.is_set():
            return
        self._task = asyncio.create_task(self._run(config), name="x728-poll-loop")
        logger.info("Poll loop started (rate=%ss)", config.rate_s)

    def stop(self) -> None:
        """Cancel the recurring schedule.

        Idempotent and safe before :meth:`start`.  A cycle already in flight
        finishes (and closes the bus) before the loop exits.
        """
        if self._stop_event is None or self._stop_event.is_set():
            return
        self._stop_event.set()
        logger.info("Poll loop stop requested")

    async def wait_closed(self) -> None:
        """Wait for the loop task to finish after :meth:`stop`."""
        if self._task is not None:
            await self._task

    async def poll_once(self, config: PollConfig) -> dict[str, float]:
        """Execute a single open-read-read-close cycle.

        Bus errors are reported and swallowed here; a register that fails
        to read is simply missing from the result and is not published.

        Returns:
            Register name to decoded value for every register read this cycle.
        """
        device = config.device
        try:
            handle = await self._bus.open(device.bus_id)
        except BusOpenError as exc:
            self._report_error(str(exc))
            return {}

        values: dict[str, float] = {}
        try:
            for reg, path in (
                (VOLTAGE_REG, config.path_voltage),
                (CAPACITY_REG, config.path_capacity),
            ):
                try:
                    raw = await self._bus.read_word(handle, device.address, reg.address)
                except BusReadError as exc:
                    self._report_error(str(exc))
                    continue
                value = decode(reg.address, raw)
                logger.debug("Battery %s: %s %s", reg.name, value, reg.unit)
                self._publisher.publish_value(path, value)
                values[reg.name] = value
        finally:
            try:
                await self._bus.close(handle)
            except BusCloseError as exc:
                self._report_error(str(exc))

        if self._health is not None:
            try:
                self._health.record_poll(values)
            except OSError:
                logger.warning("Failed to write health file", exc_info=True)
        return values

    async def _safe_poll(self, config: PollConfig) -> None:
        try:
            await self.poll_once(config)
        except Exception:
            logger.error("Poll cycle error", exc_info=True)

    async def _run(self, config: PollConfig) -> None:
        """Run cycles on a fixed-rate grid until the stop event is set."""
        assert self._stop_event is not None
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + config.rate_s

        while not self._stop_event.is_set():
            delay = next_tick - loop.time()
            if delay > 0:
                # Wait with timeout so stop() interrupts the sleep
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
                if self._stop_event.is_set():
                    break

            await self._safe_poll(config)

            next_tick += config.rate_s
            now = loop.time()
            if next_tick <= now:
                skipped = int((now - next_tick) // config.rate_s) + 1
                next_tick += skipped * config.rate_s
                logger.warning(
                    "Poll cycle overran the %ss rate, skipping %d tick(s)",
                    config.rate_s,
                    skipped,
                )

        logger.info("Poll loop stopped")

    def _report_error(self, message: str) -> None:
        self._publisher.report_error(message)
        if self._health is not None:
            try:
                self._health.record_error(message)
            except OSError:
                logger.warning("Failed to write health file", exc_info=True)
