"""OutputDriver — derives pin levels from alert counts and writes them."""

from __future__ import annotations

import threading
from collections.abc import Mapping

import structlog

from alertlight.core.types import OutputLevel, Severity, Snapshot
from alertlight.outputs.backends import PinBackend
from alertlight.outputs.exceptions import (
    HardwareUnavailableError,
    OutputsHaltedError,
    PinWriteError,
)

logger = structlog.get_logger(__name__)


def derive_level(count: int) -> OutputLevel:
    """ASSERTED while at least one incident is open."""
    return OutputLevel.ASSERTED if count > 0 else OutputLevel.DEASSERTED


class OutputDriver:
    """Applies count snapshots to the pins named in a static pin mapping.

    Every ``apply`` writes every mapped pin from the full snapshot, so a
    failed or skipped apply is corrected by the next successful one.

    Usage::

        driver = OutputDriver(backend, {Severity.CRITICAL: 18, Severity.WARNING: 14})
        levels = driver.apply(registry.snapshot())
    """

    def __init__(self, backend: PinBackend, pins: Mapping[Severity, int]) -> None:
        self._backend = backend
        self._pins: dict[Severity, int] = dict(pins)
        self._lock = threading.Lock()
        self._halted = False

    @property
    def backend(self) -> PinBackend:
        return self._backend

    @property
    def pins(self) -> dict[Severity, int]:
        """Read-only copy of the severity → pin mapping."""
        return dict(self._pins)

    @property
    def halted(self) -> bool:
        return self._halted

    def halt(self) -> None:
        """Refuse all further ``apply`` calls. Cannot be undone."""
        with self._lock:
            self._halted = True
        logger.info("outputs_halted")

    def apply(self, snapshot: Snapshot) -> dict[Severity, OutputLevel]:
        """Drive every mapped pin from *snapshot*.

        Returns the level written per severity.

        Raises:
            OutputsHaltedError: shutdown has locked the outputs.
            HardwareUnavailableError: the backend could not be opened; no
                pin was written.
            PinWriteError: a pin write failed.
        """
        with self._lock:
            if self._halted:
                raise OutputsHaltedError("outputs are halted for shutdown")

            self._open_backend()

            levels: dict[Severity, OutputLevel] = {}
            for severity, pin in self._pins.items():
                count = snapshot.get(severity, 0)
                if count < 0:
                    logger.error(
                        "negative_alert_count",
                        severity=severity,
                        count=count,
                    )
                    count = 0
                level = derive_level(count)
                self._backend.write(pin, level)
                levels[severity] = level

        logger.info(
            "output_applied",
            **{s.value.lower(): lvl.value for s, lvl in levels.items()},
        )
        return levels

    def deassert_all(self) -> None:
        """Drive every mapped pin to DEASSERTED, even while halted.

        Every pin is attempted; the first write failure is raised after
        the loop.
        """
        with self._lock:
            self._open_backend()

            first_error: PinWriteError | None = None
            for severity, pin in self._pins.items():
                try:
                    self._backend.write(pin, OutputLevel.DEASSERTED)
                except PinWriteError as exc:
                    logger.error("deassert_failed", severity=severity, pin=pin, error=str(exc))
                    if first_error is None:
                        first_error = exc

        if first_error is not None:
            raise first_error
        logger.info("outputs_deasserted", pins=sorted(self._pins.values()))

    def _open_backend(self) -> None:
        try:
            self._backend.open()
        except HardwareUnavailableError as exc:
            logger.error("hardware_open_failed", error=str(exc))
            raise
