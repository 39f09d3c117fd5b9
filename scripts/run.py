#!/usr/bin/env python3
"""Alert light entrypoint — listens for New Relic webhooks and drives the lights.

Usage::

    # Run with default config
    python scripts/run.py

    # Custom config file
    python scripts/run.py --config config/settings.yaml

    # Verbose logging, also appended to a file
    python scripts/run.py --verbose --log-file nr-alert-light.log

    # No GPIO hardware (development)
    python scripts/run.py --backend stub --port 9001
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog

from alertlight import __version__
from alertlight.alerts.tracker import AlertTracker
from alertlight.core.config import load_settings
from alertlight.core.logging import setup_logging
from alertlight.core.types import empty_snapshot
from alertlight.outputs.backends import create_pin_backend
from alertlight.outputs.driver import OutputDriver
from alertlight.outputs.exceptions import OutputError
from alertlight.outputs.shutdown import EXIT_OK, ShutdownGuard
from alertlight.server.webhook import start_webhook_server

logger = structlog.get_logger(__name__)

EXIT_STARTUP_FAILURE = 1


async def run(args: argparse.Namespace) -> int:
    """Start the listener and run until a shutdown signal arrives."""
    settings = load_settings(args.config)
    if args.backend:
        settings.outputs.backend = args.backend
    if args.port:
        settings.server.port = args.port

    level = "DEBUG" if args.verbose else args.log_level
    setup_logging(level=level, log_file=args.log_file)

    logger.info(
        "alert_light_starting",
        version=__version__,
        backend=settings.outputs.backend,
        pins={str(s): p for s, p in settings.outputs.pins.items()},
    )
    if args.verbose:
        logger.debug("verbose_logging_enabled")

    # ── Outputs ──────────────────────────────────────────────────
    backend = create_pin_backend(settings.outputs)
    driver = OutputDriver(backend, settings.outputs.pins)

    # Nothing is known to be open yet; clear anything a previous run left on.
    try:
        driver.apply(empty_snapshot())
    except OutputError as exc:
        logger.warning("initial_output_reset_failed", error=str(exc))

    # ── Tracker + shutdown guard ─────────────────────────────────
    tracker = AlertTracker(driver)
    guard = ShutdownGuard(driver)
    guard.install()

    # ── Webhook listener ─────────────────────────────────────────
    try:
        runner = await start_webhook_server(
            tracker,
            host=settings.server.host,
            port=settings.server.port,
            webhook_path=settings.server.webhook_path,
        )
    except OSError:
        logger.exception("webhook_server_start_failed", port=settings.server.port)
        # Lights still go off; a clean shutdown here is still a failed start.
        code = guard.trigger()
        guard.uninstall()
        return EXIT_STARTUP_FAILURE if code == EXIT_OK else code

    logger.info("alert_light_running")

    # ── Wait for shutdown signal ─────────────────────────────────
    code = await guard.wait()

    logger.info("alert_light_shutting_down")
    guard.uninstall()
    await runner.cleanup()

    logger.info("alert_light_stopped", exit_code=code, counts_at_exit=tracker.info()["counts"])
    return code


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Turn status lights on and off from New Relic alert webhooks.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Writes verbose logs for debugging (same as --log-level DEBUG)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also append JSON log lines to this file",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Listen port override (default from config: 9000)",
    )
    parser.add_argument(
        "--backend",
        choices=["gpio", "stub"],
        default=None,
        help="Output backend override",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
