"""
Shared test fixtures for X728 edge daemon tests.

Provides environment isolation for X728Settings tests and in-memory fakes
for the bus reader, the power loss watcher and the publisher.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-001)

TODO:
- None
"""

from __future__ import annotations

from collections.abc import Callable, Mapping

import pytest
from x728.src.errors import BusReadError, WatchError
from x728.src.models import DeviceAddress, NotificationRecord, PollConfig

# All X728Settings environment variable names, used for cleanup.
_ALL_X728_ENV_VARS = (
    "POLL_RATE_S",
    "PATH_VOLTAGE",
    "PATH_CAPACITY",
    "I2C_BUS",
    "I2C_ADDRESS",
    "GPIO_PIN",
    "DEBOUNCE_MS",
    "NOTIFICATIONS_ENABLED",
    "NOTIFICATION_PATH",
    "SOURCE_LABEL",
    "VALUE_DECIMALS",
    "HEALTH_PATH",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_x728_env(monkeypatch: pytest.MonkeyPatch, tmp_path: str) -> None:
    """Remove all X728 env vars and isolate from .env files before each test."""
    for var in _ALL_X728_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeBus:
    """In-memory BusReader that records every call in order.

    Args:
        words: Register offset to raw word returned by read_word.
        fail_registers: Register offsets whose reads raise BusReadError.
        open_error: Exception raised by open, if any.
        close_error: Exception raised by close, if any.
    """

    def __init__(
        self,
        words: Mapping[int, int] | None = None,
        *,
        fail_registers: set[int] | None = None,
        open_error: Exception | None = None,
        close_error: Exception | None = None,
    ) -> None:
        self.words = dict(words or {0x02: 0x1027, 0x04: 0x0064})
        self.fail_registers = fail_registers or set()
        self.open_error = open_error
        self.close_error = close_error
        self.calls: list[tuple] = []

    async def open(self, bus_id: int) -> str:
        self.calls.append(("open", bus_id))
        if self.open_error is not None:
            raise self.open_error
        return f"handle-{bus_id}"

    async def read_word(self, handle: str, address: int, register: int) -> int:
        self.calls.append(("read", address, register))
        if register in self.fail_registers:
            raise BusReadError(f"NACK reading register {register:#04x}")
        return self.words[register]

    async def close(self, handle: str) -> None:
        self.calls.append(("close", handle))
        if self.close_error is not None:
            raise self.close_error

    def count(self, op: str) -> int:
        return sum(1 for call in self.calls if call[0] == op)


class FakeWatcher:
    """PowerEdgeWatcher stand-in driven by :meth:`edge`."""

    def __init__(
        self,
        level: bool = False,
        *,
        open_error: WatchError | None = None,
        watch_error: WatchError | None = None,
    ) -> None:
        self.level = level
        self.open_error = open_error
        self.watch_error = watch_error
        self.callback: Callable[[bool], None] | None = None
        self.opened = 0
        self.closed = 0

    def open(self) -> None:
        if self.open_error is not None:
            raise self.open_error
        self.opened += 1

    def read(self) -> bool:
        return self.level

    def watch(self, callback: Callable[[bool], None]) -> None:
        if self.watch_error is not None:
            raise self.watch_error
        self.callback = callback

    def close(self) -> None:
        self.closed += 1

    def edge(self, level: bool) -> None:
        self.level = level
        assert self.callback is not None
        self.callback(level)


class RecordingPublisher:
    """TelemetryPublisher that keeps everything it is given."""

    def __init__(self) -> None:
        self.values: list[tuple[str, float]] = []
        self.meta: list[dict[str, str]] = []
        self.notifications: list[NotificationRecord] = []
        self.errors: list[str] = []
        self.events: list[str] = []

    def publish_value(self, path: str, value: float) -> None:
        self.values.append((path, value))
        self.events.append("value")

    def publish_meta(self, units_by_path: Mapping[str, str]) -> None:
        self.meta.append(dict(units_by_path))
        self.events.append("meta")

    def publish_notification(self, record: NotificationRecord) -> None:
        self.notifications.append(record)
        self.events.append("notification")

    def report_error(self, message: str) -> None:
        self.errors.append(message)
        self.events.append("error")


@pytest.fixture()
def fake_bus() -> FakeBus:
    return FakeBus()


@pytest.fixture()
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture()
def poll_config() -> PollConfig:
    """A short-rate poll config for loop tests."""
    return PollConfig(
        rate_s=0.05,
        path_voltage="electrical.batteries.rpi.voltage",
        path_capacity="electrical.batteries.rpi.capacity.stateOfCharge",
        device=DeviceAddress(bus_id=1, address=0x36),
    )


@pytest.fixture()
def bus_factory() -> type[FakeBus]:
    """Return the FakeBus class for tests that need custom failures."""
    return FakeBus


@pytest.fixture()
def watcher_factory() -> type[FakeWatcher]:
    """Return the FakeWatcher class."""
    return FakeWatcher
