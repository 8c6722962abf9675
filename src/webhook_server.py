"""Webhook Server for Hoarder Social Relay.

HTTP server that receives Hoarder webhook events and drives the relay.

Endpoints:
    POST /  (and /webhook) - Hoarder webhook, JSON {"bookmarkId", "operation"}.
                 Handled to completion before responding:
                 200 {"success": true} when handled (unknown operations included),
                 500 {"success": false, "error": ...} for malformed bodies or
                 internal failures, 405 for any other method.
    GET /health  - Health check endpoint, returns {"status": "ok"}
    GET /metrics - Metrics endpoint with counters, uptime and tracked bookmarks
"""

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from aiohttp import web

from src.core.config import Config, get_config
from src.core.dispatcher import PublicationDispatcher
from src.core.enrichment import EnrichmentOrchestrator
from src.core.exceptions import MalformedRequestError
from src.core.hoarder_client import HoarderClient
from src.core.http_client import close_client
from src.core.lifecycle import LifecycleTracker
from src.core.relay import WebhookRelay

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
WEBHOOK_PATHS = ("/", "/webhook")


@dataclass
class ServerMetrics:
    """Server metrics for monitoring.

    Counters are only touched from the event loop, so no locking is needed.
    """

    start_time: float = field(default_factory=time.time)
    requests_total: int = 0
    events_total: int = 0
    published_total: int = 0
    errors_total: int = 0

    def increment_requests(self) -> None:
        self.requests_total += 1

    def increment_events(self) -> None:
        self.events_total += 1

    def increment_published(self) -> None:
        self.published_total += 1

    def increment_errors(self) -> None:
        self.errors_total += 1

    def get_uptime_seconds(self) -> float:
        return time.time() - self.start_time

    def to_dict(self) -> dict[str, Any]:
        """Convert metrics to dictionary for JSON response."""
        return {
            "uptime_seconds": round(self.get_uptime_seconds(), 2),
            "requests_total": self.requests_total,
            "events_total": self.events_total,
            "published_total": self.published_total,
            "errors_total": self.errors_total,
        }


# AppKey for storing the relay instance
RELAY_KEY = web.AppKey("relay", WebhookRelay)

# AppKey for storing server metrics
METRICS_KEY = web.AppKey("metrics", ServerMetrics)


def parse_webhook_body(body: Any) -> tuple[str, str]:
    """Extract bookmark ID and operation from a decoded webhook body.

    A missing operation is returned as "" and later ignored like any other
    unrecognised operation.

    Raises:
        MalformedRequestError: If the body is not an object or has no bookmarkId.
    """
    if not isinstance(body, dict):
        raise MalformedRequestError("Request body must be a JSON object")

    bookmark_id = body.get("bookmarkId")
    if bookmark_id is None or bookmark_id == "":
        raise MalformedRequestError("Missing required field: bookmarkId")
    if not isinstance(bookmark_id, (str, int)) or isinstance(bookmark_id, bool):
        raise MalformedRequestError("bookmarkId must be a string")

    operation = body.get("operation")
    return str(bookmark_id), "" if operation is None else str(operation)


def _error_response(message: str, status: int = 500) -> web.Response:
    return web.json_response({"success": False, "error": message}, status=status)


async def webhook_handler(request: web.Request) -> web.Response:
    """Handle a Hoarder webhook event.

    Args:
        request: The incoming HTTP request.

    Returns:
        200 when the event was handled or ignored.
        405 for methods other than POST.
        500 if the body is malformed or handling failed.
    """
    if request.method != "POST":
        return web.json_response({"error": "Method not allowed"}, status=405)

    metrics = request.app[METRICS_KEY]
    metrics.increment_requests()

    try:
        body = await request.json()
        bookmark_id, operation = parse_webhook_body(body)
    except ValueError:
        # JSONDecodeError, or UnicodeDecodeError for a body that is not UTF-8
        metrics.increment_errors()
        logger.warning("Rejected webhook with invalid JSON body")
        return _error_response("Invalid JSON body")
    except MalformedRequestError as e:
        metrics.increment_errors()
        logger.warning("Rejected webhook: %s", e)
        return _error_response(str(e))

    logger.info(
        "Received webhook",
        extra={"bookmark_id": bookmark_id, "operation": operation},
    )

    try:
        outcome = await request.app[RELAY_KEY].handle_event(bookmark_id, operation)
    except Exception as e:
        metrics.increment_errors()
        logger.exception("Error processing webhook for %s", bookmark_id)
        return _error_response(str(e) or type(e).__name__)

    metrics.increment_events()
    if outcome.published:
        metrics.increment_published()

    return web.json_response({"success": True})


async def health_handler(request: web.Request) -> web.Response:
    """Health check endpoint."""
    return web.json_response({"status": "ok"})


async def metrics_handler(request: web.Request) -> web.Response:
    """Metrics endpoint for monitoring.

    Returns:
        JSON response with server metrics including:
        - uptime_seconds: Server uptime in seconds
        - requests_total: Webhook requests received
        - events_total: Webhook events handled without error
        - published_total: Events that led to a publish attempt
        - errors_total: Rejected or failed webhook requests
        - tracked_bookmarks: Bookmarks waiting for their publish
        - bookmarks_by_status: Tracked bookmarks per lifecycle status
    """
    data = request.app[METRICS_KEY].to_dict()
    statuses = request.app[RELAY_KEY].tracker.snapshot()
    data["tracked_bookmarks"] = len(statuses)
    data["bookmarks_by_status"] = dict(
        Counter(status.value for status in statuses.values())
    )
    return web.json_response(data)


def build_relay(config: Config) -> WebhookRelay:
    """Wire tracker, Hoarder client and publishers from configuration."""
    hoarder = HoarderClient(config.hoarder_api_base_url, config.hoarder_api_token)
    return WebhookRelay(
        tracker=LifecycleTracker(),
        enrichment=EnrichmentOrchestrator(hoarder),
        dispatcher=PublicationDispatcher.from_config(config),
    )


async def _close_http_client(app: web.Application) -> None:
    await close_client()


def create_app(
    relay: WebhookRelay | None = None,
    config: Config | None = None,
) -> web.Application:
    """Create and configure the aiohttp application.

    Args:
        relay: Optional WebhookRelay instance. If not provided, one is built
            from config.
        config: Configuration used to build the relay. Defaults to get_config().

    Returns:
        Configured aiohttp Application with all routes registered.
    """
    app = web.Application()

    app[METRICS_KEY] = ServerMetrics()
    app[RELAY_KEY] = relay if relay is not None else build_relay(config or get_config())

    for path in WEBHOOK_PATHS:
        app.router.add_route("*", path, webhook_handler)
    app.router.add_get("/health", health_handler)
    app.router.add_get("/metrics", metrics_handler)

    app.on_cleanup.append(_close_http_client)
    return app


async def run_server(
    host: str = DEFAULT_HOST,
    port: int = 3000,
    app: web.Application | None = None,
) -> web.AppRunner:
    """Start the webhook server.

    Args:
        host: Host to bind to (default: 0.0.0.0).
        port: Port to listen on (default: 3000).
        app: Optional pre-built application.

    Returns:
        The AppRunner instance (for testing/cleanup).
    """
    runner = web.AppRunner(app or create_app())
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info("Webhook server running on port %d", port)
    return runner
