"""Notify Gateway — Web Application Factory.

Builds the aiohttp.web application: both route tables, the error
middleware that turns GatewayError into tagged JSON responses, and the
service banner at "/".
"""

from __future__ import annotations

from typing import Optional

from aiohttp import web

from notify_gateway.api import email_routes, notification_routes
from notify_gateway.api.common import (
    CONFIG_KEY,
    DISPATCHER_KEY,
    PUSH_TOKENS_KEY,
    error_response,
    utc_timestamp,
)
from notify_gateway.config import AppConfig
from notify_gateway.dispatch.dispatcher import NotificationDispatcher
from notify_gateway.dispatch.models import DispatchResult
from notify_gateway.dispatch.push_tokens import PushTokenRegistry
from notify_gateway.errors import GatewayError
from notify_gateway.utils.logger import get_logger

logger = get_logger(__name__)


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Convert uncaught errors into JSON error bodies."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except GatewayError as e:
        logger.warning(
            "%s %s rejected: %s (%s)", request.method, request.path, e.tag, e.message,
        )
        return error_response(DispatchResult.from_error(None, e))
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error_response(DispatchResult.internal_error(None))


async def index(request: web.Request) -> web.Response:
    return web.json_response({
        "message": "Notify Gateway",
        "status": "running",
        "features": [
            "Template email via the direct email provider",
            "Workflow email and push notifications via the workflow provider",
            "Delayed delivery through provider-side workflow delays",
        ],
        "endpoints": {
            "email": "/api/email/",
            "notifications": "/api/notifications/",
            "health": "/api/email/health",
        },
        "timestamp": utc_timestamp(),
    })


def create_app(
    config: AppConfig,
    dispatcher: NotificationDispatcher,
    push_tokens: Optional[PushTokenRegistry] = None,
) -> web.Application:
    """Create the web application.

    Args:
        config: Loaded application configuration.
        dispatcher: Dispatcher with its providers already injected.
        push_tokens: Push-token registry (a fresh one by default).

    Returns:
        The configured aiohttp.web.Application.
    """
    app = web.Application(middlewares=[error_middleware])
    app[CONFIG_KEY] = config
    app[DISPATCHER_KEY] = dispatcher
    app[PUSH_TOKENS_KEY] = push_tokens or PushTokenRegistry()

    app.router.add_get("/", index)
    app.add_routes(email_routes.routes)
    app.add_routes(notification_routes.routes)

    logger.debug("Web application created with %d routes", len(app.router.routes()))
    return app
