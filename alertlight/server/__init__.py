"""HTTP surface — webhook listener and wire types."""

from alertlight.server.types import NewRelicWebhook, WebhookTarget
from alertlight.server.webhook import create_web_app, start_webhook_server

__all__ = [
    "NewRelicWebhook",
    "WebhookTarget",
    "create_web_app",
    "start_webhook_server",
]
