"""Exception hierarchy for indicator outputs."""

from __future__ import annotations


class OutputError(Exception):
    """Base exception for all output errors."""


class HardwareUnavailableError(OutputError):
    """The pin backend could not be opened (or was used unopened)."""


class PinWriteError(OutputError):
    """Setting a pin level failed."""


class OutputsHaltedError(OutputError):
    """Outputs have been locked in the safe state by shutdown."""
