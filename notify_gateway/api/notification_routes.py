"""Notify Gateway — Notification Routes (/api/notifications).

Workflow-routed email, template preview, push-token registration and
push notifications. Everything except preview and registration goes
through the workflow provider.
"""

from __future__ import annotations

from typing import Optional

from aiohttp import web

from notify_gateway.api.common import (
    CONFIG_KEY,
    DISPATCHER_KEY,
    PUSH_TOKENS_KEY,
    delay_from,
    object_field,
    read_json,
    require,
    result_response,
    utc_timestamp,
)
from notify_gateway.dispatch.models import (
    Channel,
    Delay,
    LiteralContent,
    NotificationRequest,
    Recipient,
    TemplateContent,
)
from notify_gateway.utils.logger import get_logger

logger = get_logger(__name__)

routes = web.RouteTableDef()


@routes.get("/api/notifications/health")
async def notifications_health(request: web.Request) -> web.Response:
    config = request.app[CONFIG_KEY]
    workflow = request.app[DISPATCHER_KEY].workflow
    return web.json_response({
        "status": "OK",
        "service": "notifications",
        "novu_client_ready": config.workflow.configured or config.dry_run,
        "workflow_provider": await workflow.health_check(),
        "timestamp": utc_timestamp(),
    })


# ── Email via workflow ───────────────────────────────────


@routes.post("/api/notifications/send-email")
async def send_email(request: web.Request) -> web.Response:
    body = await read_json(request)
    require(body, ("userId", "email", "subject", "content"))

    result = await request.app[DISPATCHER_KEY].dispatch(NotificationRequest(
        channel=Channel.EMAIL_WORKFLOW,
        recipient=Recipient(user_id=body["userId"], email=body["email"]),
        content=LiteralContent(subject=body["subject"], body=body["content"]),
    ))
    return result_response(
        result, "Email sent successfully",
        userId=body["userId"], email=body["email"],
    )


@routes.post("/api/notifications/send-template-email")
async def send_template_email(request: web.Request) -> web.Response:
    body = await read_json(request)
    require(body, ("userId", "email", "subject", "templateName"))
    props = object_field(body, "templateProps")

    result = await request.app[DISPATCHER_KEY].dispatch(NotificationRequest(
        channel=Channel.EMAIL_WORKFLOW,
        recipient=Recipient(user_id=body["userId"], email=body["email"]),
        content=TemplateContent(
            template_name=body["templateName"], props=props, subject=body["subject"],
        ),
    ))
    return result_response(
        result, "Template email sent successfully",
        userId=body["userId"], email=body["email"], templateName=body["templateName"],
    )


@routes.post("/api/notifications/send-delayed-email")
async def send_delayed_email(request: web.Request) -> web.Response:
    body = await read_json(request)
    require(body, ("userId", "email", "subject", "content", "delayAmount", "delayUnit"))
    delay = delay_from(body)
    logger.info("Sending delayed email (%s) to %s", delay.describe(), body["email"])

    result = await request.app[DISPATCHER_KEY].dispatch(NotificationRequest(
        channel=Channel.EMAIL_WORKFLOW,
        recipient=Recipient(user_id=body["userId"], email=body["email"]),
        content=LiteralContent(subject=body["subject"], body=body["content"]),
        delay=delay,
    ))
    return result_response(
        result, f"Email will be sent in {delay.describe()}",
        userId=body["userId"], email=body["email"], delay=delay.describe(),
    )


# ── Templates ────────────────────────────────────────────


@routes.post("/api/notifications/preview-template")
async def preview_template(request: web.Request) -> web.Response:
    body = await read_json(request)
    require(body, ("templateName",))
    props = object_field(body, "templateProps")
    renderer = request.app[DISPATCHER_KEY].renderer

    logger.info("Previewing template %s", body["templateName"])
    outcome = await renderer.render_with_validation(body["templateName"], props)
    if not outcome.success:
        raise renderer.error_for(outcome)

    return web.json_response({
        "message": "Template rendered successfully",
        "templateName": outcome.template_name,
        "props": props,
        "html": outcome.html,
        "text": outcome.text,
        "success": True,
    })


@routes.get("/api/notifications/templates")
async def list_templates(request: web.Request) -> web.Response:
    registry = request.app[DISPATCHER_KEY].renderer.registry
    return web.json_response({
        "message": "Available email templates",
        "templates": registry.describe(),
        "success": True,
    })


# ── Push ─────────────────────────────────────────────────


@routes.post("/api/notifications/register-push-token")
async def register_push_token(request: web.Request) -> web.Response:
    body = await read_json(request)
    ack = request.app[PUSH_TOKENS_KEY].register(body.get("userId"), body.get("token"))
    return web.json_response({
        "message": "Push token registered successfully",
        **ack.to_dict(),
        "success": True,
    })


def _push_request(
    body: dict, channel: Channel, delay: Optional[Delay] = None,
) -> NotificationRequest:
    return NotificationRequest(
        channel=channel,
        recipient=Recipient(
            user_id=body["userId"],
            device_token=body.get("token") or "",
        ),
        content=LiteralContent(
            subject=body["title"],
            body=body["body"],
            data=object_field(body, "data"),
        ),
        delay=delay,
    )


@routes.post("/api/notifications/push-notification")
async def push_notification(request: web.Request) -> web.Response:
    body = await read_json(request)
    require(body, ("userId", "title", "body"))
    logger.info("Sending push notification to %s", body["userId"])

    result = await request.app[DISPATCHER_KEY].dispatch(
        _push_request(body, Channel.PUSH_IMMEDIATE)
    )
    return result_response(
        result, "Push notification sent successfully",
        userId=body["userId"], title=body["title"], body=body["body"],
    )


@routes.post("/api/notifications/push-notification-delayed")
async def push_notification_delayed(request: web.Request) -> web.Response:
    body = await read_json(request)
    require(body, ("userId", "title", "body", "delayAmount", "delayUnit"))
    delay = delay_from(body)
    logger.info("Scheduling push (%s) to %s", delay.describe(), body["userId"])

    result = await request.app[DISPATCHER_KEY].dispatch(
        _push_request(body, Channel.PUSH_DELAYED, delay)
    )
    return result_response(
        result, f"Push notification will be sent in {delay.describe()}",
        userId=body["userId"], title=body["title"], delay=delay.describe(),
    )
