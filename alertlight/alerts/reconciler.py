"""EventReconciler — applies one alert event to the registry."""

from __future__ import annotations

import threading
from collections import Counter

import structlog

from alertlight.alerts.registry import AlertRegistry
from alertlight.core.types import (
    AlertEvent,
    AnomalyKind,
    IncidentState,
    Severity,
    Snapshot,
)

logger = structlog.get_logger(__name__)


class EventReconciler:
    """Turns incoming alert events into registry transitions.

    Per (severity, incident id) there are two states, absent and present:

    - absent  + open   → present
    - present + closed → absent
    - present + open   → present (no-op)
    - absent  + closed → absent (no-op, logged as an anomaly)

    Unknown severities or lifecycle states leave the registry untouched.
    ``reconcile`` never raises for any of these and always returns the
    full current snapshot, so the caller can re-apply outputs regardless.
    """

    def __init__(self, registry: AlertRegistry) -> None:
        self._registry = registry
        self._anomalies: Counter[AnomalyKind] = Counter()
        self._anomaly_lock = threading.Lock()

    @property
    def registry(self) -> AlertRegistry:
        return self._registry

    @property
    def anomaly_counts(self) -> dict[AnomalyKind, int]:
        """Anomalies seen since start, per kind (zero-filled)."""
        with self._anomaly_lock:
            return {kind: self._anomalies[kind] for kind in AnomalyKind}

    def reconcile(self, event: AlertEvent) -> Snapshot:
        """Apply *event* and return the registry's snapshot afterwards."""
        logger.debug(
            "processing_incident",
            severity=event.severity,
            incident_id=event.incident_id,
            current_state=event.current_state,
        )

        try:
            severity = Severity(event.severity)
        except ValueError:
            self._record_anomaly(AnomalyKind.UNKNOWN_SEVERITY)
            logger.warning(
                "unknown_severity",
                severity=event.severity,
                incident_id=event.incident_id,
                current_state=event.current_state,
            )
            return self._snapshot()

        try:
            state = IncidentState(event.current_state)
        except ValueError:
            self._record_anomaly(AnomalyKind.UNKNOWN_STATE)
            logger.warning(
                "unknown_state",
                severity=severity,
                incident_id=event.incident_id,
                current_state=event.current_state,
            )
            return self._snapshot()

        if state == IncidentState.OPEN:
            self._registry.record_open(severity, event.incident_id)
        elif not self._registry.record_closed(severity, event.incident_id):
            self._record_anomaly(AnomalyKind.CLOSE_WITHOUT_OPEN)

        return self._snapshot()

    def _record_anomaly(self, kind: AnomalyKind) -> None:
        with self._anomaly_lock:
            self._anomalies[kind] += 1

    def _snapshot(self) -> Snapshot:
        snapshot = self._registry.snapshot()
        logger.info(
            "alert_counts",
            **{f"open_{s.value.lower()}": count for s, count in snapshot.items()},
        )
        return snapshot
