"""
Edge daemon entrypoint for the X728 UPS board.

Runs two independent activities on one asyncio event loop:
1. **Poll loop**: reads the fuel gauge over I2C every ``POLL_RATE_S`` seconds
   and publishes voltage and state of charge.
2. **Edge notifier**: publishes the external power state at startup and on
   every debounced edge of the power loss line.

Signal K deltas go to stdout, structured JSON logs go to stderr.  Graceful
shutdown on SIGTERM/SIGINT sets a shared asyncio.Event; both components are
then stopped and the in-flight poll cycle is allowed to finish.

CHANGELOG:
- 2026-10-18: Exit with status 2 on invalid configuration (STORY-014)
- 2026-10-18: Initial creation (STORY-013)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from x728.src.errors import ConfigError

if TYPE_CHECKING:
    from x728.src.config import X728Settings
    from x728.src.models import PollConfig
    from x728.src.notifier import EdgeNotifier
    from x728.src.poll_loop import PollLoop

logger = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 2


# ---------------------------------------------------------------------------
# Structured JSON logging setup
# ---------------------------------------------------------------------------


class JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging for the edge daemon.

    Sets up the root logger with a JSON-formatted handler writing to stderr,
    leaving stdout free for Signal K deltas.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())


# ---------------------------------------------------------------------------
# Startup config logging
# ---------------------------------------------------------------------------


def log_config_summary(settings: X728Settings) -> None:
    """Log a config summary at startup."""
    logger.info(
        "X728 daemon starting with config: "
        "poll_rate_s=%s, path_voltage=%s, path_capacity=%s, "
        "i2c_bus=%s, i2c_address=%s, gpio_pin=%s, debounce_ms=%s, "
        "notifications_enabled=%s, notification_path=%s, "
        "source_label=%s, value_decimals=%s, health_path=%s",
        settings.poll_rate_s,
        settings.path_voltage,
        settings.path_capacity,
        settings.i2c_bus,
        settings.i2c_address,
        settings.gpio_pin,
        settings.debounce_ms,
        settings.notifications_enabled,
        settings.notification_path,
        settings.source_label,
        settings.value_decimals,
        settings.health_path,
    )


# ---------------------------------------------------------------------------
# Runner with graceful shutdown
# ---------------------------------------------------------------------------


async def run(
    *,
    poll_loop: PollLoop,
    notifier: EdgeNotifier | None,
    config: PollConfig,
    shutdown_event: asyncio.Event,
) -> None:
    """Start both components, wait for shutdown, then stop them.

    Args:
        poll_loop: The fuel gauge poll loop.
        notifier: The power edge notifier, or None when disabled.
        config: Poll loop configuration.
        shutdown_event: Event to signal graceful shutdown.
    """
    if notifier is not None:
        await notifier.start()
    try:
        await poll_loop.start(config)
        await shutdown_event.wait()
    finally:
        poll_loop.stop()
        if notifier is not None:
            notifier.stop()
        await poll_loop.wait_closed()
    logger.info("Shutdown complete")


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


async def async_main(settings: X728Settings) -> None:
    """Async entrypoint: build components from settings and run them.

    Sets up SIGTERM/SIGINT handlers to trigger graceful shutdown.
    """
    from x728.src.bus import BusReader
    from x728.src.gpio import PowerEdgeWatcher
    from x728.src.health import HealthWriter
    from x728.src.notifier import EdgeNotifier
    from x728.src.poll_loop import PollLoop
    from x728.src.publisher import SignalKStreamPublisher

    config = settings.poll_config()

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, lambda: _handle_signal(shutdown_event))

    health = HealthWriter(settings.health_path) if settings.health_path else None
    publisher = SignalKStreamPublisher(
        source_label=settings.source_label,
        decimals=settings.value_decimals,
    )

    notifier = None
    if settings.notifications_enabled:
        notifier = EdgeNotifier(
            watcher=PowerEdgeWatcher(
                pin=settings.gpio_pin,
                debounce_ms=settings.debounce_ms,
            ),
            publisher=publisher,
            path=settings.notification_path,
            health=health,
        )

    poll_loop = PollLoop(bus=BusReader(), publisher=publisher, health=health)

    await run(
        poll_loop=poll_loop,
        notifier=notifier,
        config=config,
        shutdown_event=shutdown_event,
    )


def _handle_signal(shutdown_event: asyncio.Event) -> None:
    """Handle SIGTERM/SIGINT by setting the shutdown event.

    Args:
        shutdown_event: The event to set for graceful shutdown.
    """
    logger.info("Received shutdown signal, initiating graceful shutdown")
    shutdown_event.set()


def main() -> None:
    """Synchronous entrypoint for the edge daemon."""
    from x728.src.config import load_settings

    configure_logging()
    try:
        settings = load_settings()
        settings.poll_config()
    except ConfigError as exc:
        logger.error("%s", exc)
        sys.exit(EXIT_CONFIG_ERROR)

    configure_logging(settings.log_level)
    log_config_summary(settings)
    asyncio.run(async_main(settings))


if __name__ == "__main__":
    main()
