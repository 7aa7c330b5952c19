"""Notify Gateway — Route Helpers.

Application keys, JSON body parsing, required-field checks and the
mapping from error tags to HTTP status codes shared by both route
tables.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from aiohttp import web

from notify_gateway.config import AppConfig
from notify_gateway.dispatch.dispatcher import NotificationDispatcher
from notify_gateway.dispatch.models import INTERNAL_ERROR, Delay, DispatchResult
from notify_gateway.dispatch.push_tokens import PushTokenRegistry
from notify_gateway.errors import (
    DelayUnitInvalid,
    MissingFields,
    ProviderError,
    ProviderNotConfigured,
    RenderFailed,
    UnknownTemplate,
    ValidationFailed,
)

# ── Application Keys ──────────────────────────────────────
CONFIG_KEY = web.AppKey("config", AppConfig)
DISPATCHER_KEY = web.AppKey("dispatcher", NotificationDispatcher)
PUSH_TOKENS_KEY = web.AppKey("push_tokens", PushTokenRegistry)

# ── Error Tag → HTTP Status ──────────────────────────────
STATUS_BY_TAG: dict[str, int] = {
    MissingFields.tag: 400,
    UnknownTemplate.tag: 400,
    ValidationFailed.tag: 400,
    DelayUnitInvalid.tag: 400,
    RenderFailed.tag: 500,
    ProviderNotConfigured.tag: 503,
    ProviderError.tag: 502,
    INTERNAL_ERROR: 500,
}


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def read_json(request: web.Request) -> dict[str, Any]:
    """Parse the request body as a JSON object.

    Raises:
        ValidationFailed: If the body is not valid JSON or not an object.
    """
    if not request.can_read_body:
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise ValidationFailed(["request body must be valid JSON"]) from None
    if not isinstance(body, dict):
        raise ValidationFailed(["request body must be a JSON object"])
    return body


def _absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require(body: Mapping[str, Any], fields: Iterable[str]) -> None:
    """Raise MissingFields naming every absent field, in order."""
    missing = [name for name in fields if _absent(body.get(name))]
    if missing:
        raise MissingFields(missing)


def object_field(body: Mapping[str, Any], name: str) -> dict[str, Any]:
    """Return an optional JSON-object field, {} when absent.

    Raises:
        ValidationFailed: If the field is present but not an object.
    """
    value = body.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationFailed([f"{name} must be an object"])
    return value


def delay_from(body: Mapping[str, Any]) -> Delay | None:
    """Delay from delayAmount/delayUnit, or None when neither is given."""
    amount, unit = body.get("delayAmount"), body.get("delayUnit")
    if _absent(amount) and _absent(unit):
        return None
    return Delay(amount=amount, unit=unit)


def error_response(result: DispatchResult) -> web.Response:
    """JSON error body with the status mapped from the error tag."""
    status = STATUS_BY_TAG.get(result.error or INTERNAL_ERROR, 500)
    return web.json_response(result.to_dict(), status=status)


def result_response(result: DispatchResult, message: str, **echo: Any) -> web.Response:
    """Success body (message, echoed request fields, result) or error body."""
    if not result.success:
        return error_response(result)
    return web.json_response({"message": message, **echo, **result.to_dict()})
