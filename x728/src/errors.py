"""
Error taxonomy for the X728 edge daemon.

Bus errors are per-cycle and non-fatal: the poll loop reports them and the
affected value is simply not published for that cycle.  A WatchError disables
power notifications only.  A ConfigError prevents the daemon from starting.

CHANGELOG:
- 2026-10-18: Initial creation (STORY-002)

TODO:
- None
"""

from __future__ import annotations


class X728Error(Exception):
    """Base class for all X728 daemon errors."""


class BusError(X728Error):
    """An I2C transport failure."""


class BusOpenError(BusError):
    """The I2C bus could not be claimed."""


class BusReadError(BusError):
    """A register read failed (transport error or NACK)."""


class BusCloseError(BusError):
    """Releasing the I2C bus handle failed."""


class WatchError(X728Error):
    """The power loss GPIO line could not be opened, read, or monitored."""


class ConfigError(X728Error):
    """Invalid configuration detected at startup."""
