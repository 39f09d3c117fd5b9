"""Wire types for the New Relic alert webhook."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from alertlight.core.types import AlertEvent


class WebhookTarget(BaseModel):
    """One entity the violating condition was evaluated against."""

    id: str = ""
    name: str = ""
    link: str = ""
    product: str = ""
    type: str = ""
    labels: dict[str, str] = Field(default_factory=dict)


class NewRelicWebhook(BaseModel):
    """New Relic alert policy webhook body.

    Only ``severity``, ``incident_id`` and ``current_state`` drive the
    lights; the rest is kept for logging. Unknown keys are ignored.
    """

    severity: str
    incident_id: int
    current_state: str

    account_id: int | None = None
    account_name: str = ""
    condition_id: int | None = None
    condition_family_id: int | None = None
    condition_name: str = ""
    policy_name: str = ""
    policy_url: str = ""
    event_type: str = ""
    details: str = ""
    owner: str = ""
    duration: int | None = None
    timestamp: int | None = None
    incident_url: str = ""
    incident_acknowledge_url: str = ""
    violation_callback_url: str = ""
    violation_chart_url: Any = None
    runbook_url: Any = None
    open_violations_count_critical: int | None = None
    open_violations_count_warning: int | None = None
    closed_violations_count_critical: int | None = None
    closed_violations_count_warning: int | None = None
    targets: list[WebhookTarget] = Field(default_factory=list)

    def to_event(self) -> AlertEvent:
        return AlertEvent(
            severity=self.severity,
            incident_id=self.incident_id,
            current_state=self.current_state,
        )
