"""AlertRegistry — in-memory sets of open incidents, keyed by severity."""

from __future__ import annotations

import threading

import structlog

from alertlight.core.types import Severity, Snapshot

logger = structlog.get_logger(__name__)


class AlertRegistry:
    """Authoritative record of which incidents are currently open.

    One set of incident ids per :class:`Severity`. Ids are only unique within
    a severity, so ``(CRITICAL, 7)`` and ``(WARNING, 7)`` are distinct.
    All reads and writes go through a single lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._open: dict[Severity, set[int]] = {s: set() for s in Severity}

    def record_open(self, severity: Severity, incident_id: int) -> bool:
        """Mark an incident open. Returns True if it was not already open."""
        with self._lock:
            incidents = self._open[severity]
            if incident_id in incidents:
                added = False
            else:
                incidents.add(incident_id)
                added = True

        if added:
            logger.info("incident_opened", severity=severity, incident_id=incident_id)
        else:
            logger.debug("incident_already_open", severity=severity, incident_id=incident_id)
        return added

    def record_closed(self, severity: Severity, incident_id: int) -> bool:
        """Mark an incident closed. Returns True if it was open.

        Closing an incident that was never seen open is tolerated (missed
        webhook, restart, reordering) and only logged.
        """
        with self._lock:
            incidents = self._open[severity]
            if incident_id in incidents:
                incidents.discard(incident_id)
                removed = True
            else:
                removed = False

        if removed:
            logger.info("incident_closed", severity=severity, incident_id=incident_id)
        else:
            logger.warning("close_without_open", severity=severity, incident_id=incident_id)
        return removed

    def open_count(self, severity: Severity | str) -> int:
        """Number of open incidents for *severity*; 0 for unknown severities."""
        try:
            key = Severity(severity)
        except ValueError:
            return 0
        with self._lock:
            return len(self._open[key])

    def open_incidents(self, severity: Severity) -> frozenset[int]:
        """Ids currently open for *severity*."""
        with self._lock:
            return frozenset(self._open[severity])

    def snapshot(self) -> Snapshot:
        """Counts for every severity, read atomically."""
        with self._lock:
            return {severity: len(ids) for severity, ids in self._open.items()}
