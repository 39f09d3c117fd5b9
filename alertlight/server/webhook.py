"""Webhook listener — receives New Relic alert webhooks over HTTP.

Runs as an ``aiohttp`` web server. Exposes:
- ``POST <webhook_path>`` → reconcile the alert and re-apply the lights
- ``GET /api/alerts``     → JSON diagnostics (counts, open ids, anomalies)
- ``GET /health``         → liveness probe
"""

from __future__ import annotations

import structlog
from aiohttp import web
from pydantic import ValidationError

from alertlight.alerts.tracker import AlertTracker
from alertlight.core.types import snapshot_to_json
from alertlight.outputs.exceptions import OutputError, OutputsHaltedError
from alertlight.server.types import NewRelicWebhook

logger = structlog.get_logger(__name__)


async def _handle_webhook(request: web.Request) -> web.Response:
    tracker: AlertTracker = request.app["tracker"]

    body = await request.read()
    try:
        payload = NewRelicWebhook.model_validate_json(body)
    except ValidationError as exc:
        logger.warning("malformed_request", error=str(exc), remote=request.remote)
        return web.Response(status=400, text=str(exc))

    logger.info(
        "incident_received",
        severity=payload.severity,
        incident_id=payload.incident_id,
        current_state=payload.current_state,
        condition_name=payload.condition_name,
        policy_name=payload.policy_name,
    )

    snapshot = tracker.reconcile(payload.to_event())
    try:
        levels = tracker.apply_outputs(snapshot)
    except OutputsHaltedError:
        logger.warning("webhook_rejected_during_shutdown", incident_id=payload.incident_id)
        return web.Response(status=503, text="shutting down")
    except OutputError as exc:
        logger.error("output_apply_failed", error=str(exc), incident_id=payload.incident_id)
        return web.Response(status=500, text=f"output error: {exc}")

    return web.json_response({
        "counts": snapshot_to_json(snapshot),
        "outputs": {str(s): str(level) for s, level in levels.items()},
    })


async def _handle_info(request: web.Request) -> web.Response:
    tracker: AlertTracker = request.app["tracker"]
    return web.json_response(tracker.info())


async def _handle_health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


def create_web_app(tracker: AlertTracker, webhook_path: str = "/") -> web.Application:
    """Create the aiohttp web application."""
    app = web.Application()
    app["tracker"] = tracker
    app.router.add_post(webhook_path, _handle_webhook)
    app.router.add_get("/api/alerts", _handle_info)
    app.router.add_get("/health", _handle_health)
    return app


async def start_webhook_server(
    tracker: AlertTracker,
    host: str = "0.0.0.0",
    port: int = 9000,
    webhook_path: str = "/",
) -> web.AppRunner:
    """Start the webhook server. Returns the runner for cleanup."""
    app = create_web_app(tracker, webhook_path=webhook_path)
    runner = web.AppRunner(app, handle_signals=False)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info("webhook_server_started", host=host, port=port, path=webhook_path)
    return runner
