"""Notify Gateway — Direct Email Routes (/api/email).

Template emails delivered through the direct email provider. Each
dedicated route fills the template's property bag from the request,
picks the subject line and dispatches on the email-direct channel.
"""

from __future__ import annotations

from typing import Any

from aiohttp import web

from notify_gateway.api.common import (
    CONFIG_KEY,
    DISPATCHER_KEY,
    read_json,
    require,
    result_response,
    utc_timestamp,
)
from notify_gateway.dispatch.models import (
    Channel,
    NotificationRequest,
    Recipient,
    TemplateContent,
)
from notify_gateway.emails.validator import validate
from notify_gateway.errors import ValidationFailed
from notify_gateway.utils.logger import get_logger

logger = get_logger(__name__)

routes = web.RouteTableDef()

DEFAULT_SUPPORT_EMAIL = "support@company.com"
DEFAULT_EXPIRES_IN = "24 hours"
DEFAULT_NEWSLETTER_SUBJECT = "Your Weekly Newsletter"

_SHORT_DESCRIPTIONS = {
    "welcome": "Welcome email for new users",
    "confirmation": "Email confirmation template",
    "newsletter": "Newsletter with articles",
}


async def _send(
    request: web.Request,
    template_name: str,
    email: str,
    subject: str,
    props: dict[str, Any],
    message: str,
    **echo: Any,
) -> web.Response:
    dispatcher = request.app[DISPATCHER_KEY]
    logger.info("Sending %s email to %s", template_name, email)
    result = await dispatcher.dispatch(NotificationRequest(
        channel=Channel.EMAIL_DIRECT,
        recipient=Recipient(email=email),
        content=TemplateContent(template_name=template_name, props=props, subject=subject),
    ))
    return result_response(result, message, email=email, **echo)


@routes.get("/api/email/health")
async def email_health(request: web.Request) -> web.Response:
    config = request.app[CONFIG_KEY]
    dispatcher = request.app[DISPATCHER_KEY]
    ready = config.email.configured or config.dry_run

    body = {
        "status": "OK" if ready else "ERROR",
        "service": "email",
        "provider": dispatcher.email_sender.name,
        "available_templates": dispatcher.renderer.available_templates(),
        "resend_api_key_configured": config.email.configured,
        "from_email": config.email.from_email or "not configured",
        "dry_run": config.dry_run,
        "timestamp": utc_timestamp(),
    }
    if not ready:
        body["message"] = "RESEND_API_KEY environment variable is required"
    return web.json_response(body, status=200 if ready else 503)


@routes.get("/api/email/templates")
async def email_templates(request: web.Request) -> web.Response:
    dispatcher = request.app[DISPATCHER_KEY]
    registry = dispatcher.renderer.registry
    templates = [
        {
            "name": name,
            "description": _SHORT_DESCRIPTIONS.get(name, registry.get(name).description),
            "validation_example": validate(name, {}, registry).to_dict(),
        }
        for name in registry.names()
    ]
    return web.json_response({
        "message": "Available email templates",
        "templates": templates,
        "provider": dispatcher.email_sender.name,
        "success": True,
    })


@routes.post("/api/email/send-welcome")
async def send_welcome(request: web.Request) -> web.Response:
    body = await read_json(request)
    require(body, ("email", "firstName", "companyName", "loginUrl"))

    props = {
        "firstName": body["firstName"],
        "companyName": body["companyName"],
        "loginUrl": body["loginUrl"],
        "supportEmail": body.get("supportEmail") or DEFAULT_SUPPORT_EMAIL,
    }
    return await _send(
        request, "welcome", body["email"],
        f"Welcome to {body['companyName']}! 🎉", props,
        "Welcome email sent successfully",
    )


@routes.post("/api/email/send-confirmation")
async def send_confirmation(request: web.Request) -> web.Response:
    body = await read_json(request)
    require(body, ("email", "firstName", "companyName", "confirmUrl"))

    props = {
        "firstName": body["firstName"],
        "companyName": body["companyName"],
        "confirmUrl": body["confirmUrl"],
        "expiresIn": body.get("expiresIn") or DEFAULT_EXPIRES_IN,
    }
    return await _send(
        request, "confirmation", body["email"],
        "Please confirm your email address", props,
        "Confirmation email sent successfully",
    )


@routes.post("/api/email/send-newsletter")
async def send_newsletter(request: web.Request) -> web.Response:
    body = await read_json(request)
    require(body, ("email", "firstName", "companyName", "unsubscribeUrl"))

    props = {
        "firstName": body["firstName"],
        "companyName": body["companyName"],
        "articles": body.get("articles") or [],
        "unsubscribeUrl": body["unsubscribeUrl"],
        "webViewUrl": body.get("webViewUrl"),
    }
    return await _send(
        request, "newsletter", body["email"],
        body.get("subject") or DEFAULT_NEWSLETTER_SUBJECT, props,
        "Newsletter email sent successfully",
    )


@routes.post("/api/email/send-template")
async def send_template(request: web.Request) -> web.Response:
    body = await read_json(request)
    require(body, ("email", "template", "subject", "props"))
    if not isinstance(body["props"], dict):
        raise ValidationFailed(["props must be an object"])

    template = body["template"]
    return await _send(
        request, template, body["email"], body["subject"], body["props"],
        f"{template} email sent successfully",
        template=template,
    )
