"""Indicator outputs — pin backends, output driver, shutdown guard."""

from alertlight.outputs.backends import (
    PinBackend,
    RPiGPIOBackend,
    StubPinBackend,
    create_pin_backend,
)
from alertlight.outputs.driver import OutputDriver, derive_level
from alertlight.outputs.exceptions import (
    HardwareUnavailableError,
    OutputError,
    OutputsHaltedError,
    PinWriteError,
)
from alertlight.outputs.shutdown import (
    EXIT_OK,
    EXIT_SHUTDOWN_HARDWARE_FAILURE,
    ShutdownGuard,
)

__all__ = [
    "EXIT_OK",
    "EXIT_SHUTDOWN_HARDWARE_FAILURE",
    "HardwareUnavailableError",
    "OutputDriver",
    "OutputError",
    "OutputsHaltedError",
    "PinBackend",
    "PinWriteError",
    "RPiGPIOBackend",
    "ShutdownGuard",
    "StubPinBackend",
    "create_pin_backend",
    "derive_level",
]
