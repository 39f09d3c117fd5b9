"""AlertTracker — the core operations exposed to the webhook server."""

from __future__ import annotations

from typing import Any

import structlog

from alertlight.alerts.reconciler import EventReconciler
from alertlight.alerts.registry import AlertRegistry
from alertlight.core.types import (
    AlertEvent,
    OutputLevel,
    Severity,
    Snapshot,
    snapshot_to_json,
)
from alertlight.outputs.driver import OutputDriver

logger = structlog.get_logger(__name__)


class AlertTracker:
    """Owns the registry and wires reconciliation to output application.

    Usage::

        tracker = AlertTracker(driver)
        snapshot = tracker.reconcile(event)
        tracker.apply_outputs(snapshot)  # may raise OutputError
    """

    def __init__(
        self,
        driver: OutputDriver,
        registry: AlertRegistry | None = None,
    ) -> None:
        self._registry = registry or AlertRegistry()
        self._reconciler = EventReconciler(self._registry)
        self._driver = driver

    @property
    def registry(self) -> AlertRegistry:
        return self._registry

    @property
    def reconciler(self) -> EventReconciler:
        return self._reconciler

    @property
    def driver(self) -> OutputDriver:
        return self._driver

    def reconcile(self, event: AlertEvent) -> Snapshot:
        """Apply one event to the registry. Never raises for domain values."""
        return self._reconciler.reconcile(event)

    def apply_outputs(self, snapshot: Snapshot) -> dict[Severity, OutputLevel]:
        """Drive the lights from *snapshot*. Raises OutputError on failure."""
        return self._driver.apply(snapshot)

    def current_counts(self) -> Snapshot:
        return self._registry.snapshot()

    def handle(self, event: AlertEvent) -> tuple[Snapshot, dict[Severity, OutputLevel]]:
        """Reconcile *event* then apply outputs.

        The registry change stands even if applying outputs raises.
        """
        snapshot = self.reconcile(event)
        return snapshot, self.apply_outputs(snapshot)

    def info(self) -> dict[str, Any]:
        """Diagnostics payload for the info endpoint."""
        return {
            "counts": snapshot_to_json(self.current_counts()),
            "open_incidents": {
                str(s): sorted(self._registry.open_incidents(s)) for s in Severity
            },
            "anomalies": {
                str(kind): n for kind, n in self._reconciler.anomaly_counts.items()
            },
            "pins": {str(s): pin for s, pin in self._driver.pins.items()},
            "halted": self._driver.halted,
        }
