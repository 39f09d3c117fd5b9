"""Alert tracking — open-incident registry, reconciliation, core facade."""

from alertlight.alerts.reconciler import EventReconciler
from alertlight.alerts.registry import AlertRegistry
from alertlight.alerts.tracker import AlertTracker

__all__ = [
    "AlertRegistry",
    "AlertTracker",
    "EventReconciler",
]
