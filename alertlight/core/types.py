"""Domain types for alert tracking and output derivation."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class Severity(StrEnum):
    """Alert severity class. Each one drives exactly one output pin."""

    CRITICAL = "CRITICAL"
    WARNING = "WARNING"


class IncidentState(StrEnum):
    """Incident lifecycle state as sent on the wire."""

    OPEN = "open"
    CLOSED = "closed"


class OutputLevel(StrEnum):
    """Logical level of an output channel."""

    ASSERTED = "ASSERTED"
    DEASSERTED = "DEASSERTED"


class AnomalyKind(StrEnum):
    """Non-fatal deviations seen while reconciling events."""

    UNKNOWN_SEVERITY = "unknown_severity"
    UNKNOWN_STATE = "unknown_state"
    CLOSE_WITHOUT_OPEN = "close_without_open"


# Point-in-time count of open incidents per severity.
Snapshot = dict[Severity, int]


class AlertEvent(BaseModel):
    """A decoded alert-state change.

    ``severity`` and ``current_state`` stay as raw strings so unrecognised
    values reach the reconciler and can be logged verbatim.
    """

    severity: str
    incident_id: int
    current_state: str


def empty_snapshot() -> Snapshot:
    """Snapshot with every severity at zero."""
    return {severity: 0 for severity in Severity}


def snapshot_to_json(snapshot: Snapshot) -> dict[str, int]:
    """Convert a snapshot to a JSON-friendly dict keyed by severity name."""
    return {str(severity): count for severity, count in snapshot.items()}
