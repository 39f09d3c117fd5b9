"""Core module — config, types, logging."""

from alertlight.core.config import Settings, get_settings, load_settings, reset_settings
from alertlight.core.logging import setup_logging
from alertlight.core.types import (
    AlertEvent,
    AnomalyKind,
    IncidentState,
    OutputLevel,
    Severity,
    Snapshot,
    empty_snapshot,
    snapshot_to_json,
)

__all__ = [
    "AlertEvent",
    "AnomalyKind",
    "IncidentState",
    "OutputLevel",
    "Settings",
    "Severity",
    "Snapshot",
    "empty_snapshot",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
    "snapshot_to_json",
]
