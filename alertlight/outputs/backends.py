"""Pin backends — the hardware capability the output driver writes through.

Hardware connection (default BCM numbering):

- GPIO 18 → CRITICAL light
- GPIO 14 → WARNING light

Lights are driven active-high: ASSERTED sets the pin HIGH.
"""

from __future__ import annotations

import abc
import threading
from types import ModuleType

import structlog

from alertlight.core.config import OutputsConfig
from alertlight.core.types import OutputLevel
from alertlight.outputs.exceptions import HardwareUnavailableError, PinWriteError

logger = structlog.get_logger(__name__)


class PinBackend(abc.ABC):
    """Abstract access to binary output pins.

    ``open()`` must be idempotent: callers open before every batch of
    writes and a handle left open from an earlier batch is not an error.
    """

    @property
    @abc.abstractmethod
    def is_open(self) -> bool:
        """Whether the handle is currently open."""

    @abc.abstractmethod
    def open(self) -> None:
        """Acquire the hardware handle. Raises HardwareUnavailableError."""

    @abc.abstractmethod
    def write(self, pin: int, level: OutputLevel) -> None:
        """Configure *pin* as an output and drive it to *level*."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the hardware handle."""


class RPiGPIOBackend(PinBackend):
    """Drives Raspberry Pi header pins through ``RPi.GPIO``.

    The library is imported on first ``open()`` so the package can be
    installed and tested on hosts without GPIO hardware.
    """

    def __init__(self, numbering: str = "BCM") -> None:
        self._numbering = numbering
        self._gpio: ModuleType | None = None
        self._configured: set[int] = set()
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._gpio is not None

    def open(self) -> None:
        with self._lock:
            if self._gpio is not None:
                return
            try:
                import RPi.GPIO as GPIO  # noqa: N814
            except ImportError as exc:
                raise HardwareUnavailableError("RPi.GPIO is not installed") from exc
            except RuntimeError as exc:
                # Raised at import time on hosts that are not a Raspberry Pi.
                raise HardwareUnavailableError(f"RPi.GPIO unusable: {exc}") from exc

            try:
                GPIO.setmode(GPIO.BCM if self._numbering == "BCM" else GPIO.BOARD)
                GPIO.setwarnings(False)
            except (RuntimeError, ValueError) as exc:
                raise HardwareUnavailableError(f"GPIO open failed: {exc}") from exc

            self._gpio = GPIO
            logger.info("gpio_opened", numbering=self._numbering)

    def write(self, pin: int, level: OutputLevel) -> None:
        gpio = self._gpio
        if gpio is None:
            raise HardwareUnavailableError("GPIO handle is not open")

        value = gpio.HIGH if level == OutputLevel.ASSERTED else gpio.LOW
        try:
            with self._lock:
                if pin not in self._configured:
                    gpio.setup(pin, gpio.OUT)
                    self._configured.add(pin)
                gpio.output(pin, value)
        except (RuntimeError, ValueError) as exc:
            raise PinWriteError(f"failed to set pin {pin} {level}: {exc}") from exc

    def close(self) -> None:
        with self._lock:
            if self._gpio is None:
                return
            if self._configured:
                try:
                    self._gpio.cleanup(list(self._configured))
                except RuntimeError as exc:
                    logger.warning("gpio_cleanup_failed", error=str(exc))
            self._configured.clear()
            self._gpio = None
        logger.info("gpio_closed")


class StubPinBackend(PinBackend):
    """In-memory backend for development hosts and tests.

    ``available=False`` makes every ``open()`` fail, as a missing or
    inaccessible GPIO device would.
    """

    def __init__(self, available: bool = True) -> None:
        self.available = available
        self._open = False
        self._levels: dict[int, OutputLevel] = {}
        self.open_calls = 0

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def levels(self) -> dict[int, OutputLevel]:
        """Last level written per pin (for testing)."""
        return dict(self._levels)

    def level(self, pin: int) -> OutputLevel | None:
        return self._levels.get(pin)

    def open(self) -> None:
        self.open_calls += 1
        if not self.available:
            raise HardwareUnavailableError("stub backend marked unavailable")
        self._open = True

    def write(self, pin: int, level: OutputLevel) -> None:
        if not self._open:
            raise HardwareUnavailableError("stub backend is not open")
        self._levels[pin] = level
        logger.debug("stub_pin_write", pin=pin, level=level)

    def close(self) -> None:
        self._open = False


def create_pin_backend(config: OutputsConfig) -> PinBackend:
    """Build the backend named by ``config.backend``."""
    if config.backend == "gpio":
        return RPiGPIOBackend(numbering=config.pin_numbering)
    if config.backend == "stub":
        logger.info("stub_backend_selected")
        return StubPinBackend()
    raise ValueError(f"Unknown output backend: {config.backend}")
