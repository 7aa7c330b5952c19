"""Notify Gateway — Notification Dispatcher.

Routes a NotificationRequest to exactly one provider call, or to none
when the request is rejected. Steps, in order:

  1. required fields for the channel
  2. delay check (unit, then positive integer amount)
  3. template rendering with validation (email templates only)
  4. provider selection: direct email API or workflow trigger
  5. normalization of the provider response into a DispatchResult

Every expected failure becomes an unsuccessful DispatchResult; nothing
is retried here.
"""

from __future__ import annotations

import base64
from typing import Any, Mapping, Optional

from notify_gateway.config import AppConfig, WorkflowIds
from notify_gateway.dispatch.models import (
    DELAY_UNITS,
    Channel,
    DispatchResult,
    LiteralContent,
    NotificationRequest,
    TemplateContent,
)
from notify_gateway.emails.renderer import EmailRenderer
from notify_gateway.errors import (
    DelayUnitInvalid,
    GatewayError,
    MissingFields,
    ValidationFailed,
)
from notify_gateway.providers.base import (
    EmailMessage,
    EmailSender,
    WorkflowEvent,
    WorkflowTrigger,
)
from notify_gateway.utils.logger import get_logger

logger = get_logger(__name__)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def coerce_delay_amount(amount: Any) -> int:
    """Coerce a delay amount to a positive integer.

    Accepts ints, integral floats and numeric strings.

    Raises:
        ValidationFailed: For non-numeric or non-positive amounts.
    """
    if isinstance(amount, bool):
        value: Optional[int] = None
    elif isinstance(amount, int):
        value = amount
    elif isinstance(amount, float) and amount.is_integer():
        value = int(amount)
    elif isinstance(amount, str):
        try:
            value = int(amount.strip())
        except ValueError:
            value = None
    else:
        value = None

    if value is None or value <= 0:
        raise ValidationFailed([f"delay amount must be a positive integer, got {amount!r}"])
    return value


class NotificationDispatcher:
    """Dispatches notification requests to the injected providers.

    Holds no per-request state, so one instance serves concurrent
    dispatches.

    Attributes:
        email_sender: Direct email provider.
        workflow: Workflow-trigger provider.
        renderer: Template renderer.
        from_email: Sender address for direct email.
        workflows: Workflow ids per channel.
        push_provider_id: Provider id used for just-in-time push tokens.
    """

    def __init__(
        self,
        email_sender: EmailSender,
        workflow: WorkflowTrigger,
        from_email: str,
        workflows: Optional[WorkflowIds] = None,
        renderer: Optional[EmailRenderer] = None,
        push_provider_id: str = "expo",
    ) -> None:
        self.email_sender = email_sender
        self.workflow = workflow
        self.from_email = from_email
        self.workflows = workflows or WorkflowIds()
        self.renderer = renderer or EmailRenderer()
        self.push_provider_id = push_provider_id

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        email_sender: EmailSender,
        workflow: WorkflowTrigger,
        renderer: Optional[EmailRenderer] = None,
    ) -> "NotificationDispatcher":
        """Build a dispatcher from the app configuration."""
        return cls(
            email_sender=email_sender,
            workflow=workflow,
            from_email=config.email.from_email,
            workflows=config.workflow.workflows,
            renderer=renderer,
            push_provider_id=config.workflow.push_provider_id,
        )

    async def dispatch(self, request: NotificationRequest) -> DispatchResult:
        """Dispatch one request.

        Args:
            request: The notification request.

        Returns:
            DispatchResult. Never raises for expected failures;
            unexpected ones are logged and reported as InternalError.
        """
        channel = request.channel
        try:
            return await self._dispatch(request)
        except GatewayError as e:
            logger.warning(
                "Dispatch %s for %s rejected: %s (%s)",
                channel.value, request.recipient.user_id or request.recipient.email,
                e.tag, e.message,
            )
            return DispatchResult.from_error(channel, e)
        except Exception:
            logger.exception("Unexpected error dispatching %s", channel.value)
            return DispatchResult.internal_error(channel)

    async def _dispatch(self, request: NotificationRequest) -> DispatchResult:
        self._check_required_fields(request)
        overrides = self._delay_overrides(request)

        if request.channel is Channel.EMAIL_DIRECT:
            message = await self._build_email(request)
            response = await self.email_sender.send_email(message)
            return self._normalize(request, self.email_sender.name, response, "id")

        if request.channel is Channel.EMAIL_WORKFLOW:
            event = await self._build_email_event(request, overrides)
        else:
            event = self._build_push_event(request, overrides)

        response = await self.workflow.trigger(event)
        return self._normalize(request, self.workflow.name, response, "transactionId")

    # ── Step 1: required fields ──────────────────────────

    def _check_required_fields(self, request: NotificationRequest) -> None:
        """Raise MissingFields listing every absent field for the channel."""
        channel = request.channel
        recipient = request.recipient
        content = request.content
        missing: list[str] = []

        if channel is not Channel.EMAIL_DIRECT and _blank(recipient.user_id):
            missing.append("userId")

        if channel.is_email:
            if _blank(recipient.email):
                missing.append("email")
            if _blank(content.subject):
                missing.append("subject")
            if isinstance(content, TemplateContent):
                if _blank(content.template_name):
                    missing.append("templateName")
            elif _blank(content.body):
                missing.append("content")
        else:
            if isinstance(content, TemplateContent):
                raise ValidationFailed(["templates are only supported on email channels"])
            if _blank(content.subject):
                missing.append("title")
            if _blank(content.body):
                missing.append("body")

        if channel.requires_delay:
            if request.delay is None or _blank(request.delay.amount):
                missing.append("delayAmount")
            if request.delay is None or _blank(request.delay.unit):
                missing.append("delayUnit")

        if missing:
            raise MissingFields(missing)

    # ── Step 2: delay ────────────────────────────────────

    def _delay_overrides(self, request: NotificationRequest) -> Optional[dict[str, Any]]:
        """Build the provider delay override, or None for immediate delivery.

        Raises:
            ValidationFailed: If a delay is supplied for direct email,
                or the amount is not a positive integer.
            DelayUnitInvalid: If the unit is not recognized.
        """
        delay = request.delay
        if delay is None:
            return None
        if request.channel in (Channel.EMAIL_DIRECT, Channel.PUSH_IMMEDIATE):
            raise ValidationFailed(
                [f"delay is not supported on channel {request.channel.value}"]
            )

        unit = delay.unit.strip().lower() if isinstance(delay.unit, str) else delay.unit
        if unit not in DELAY_UNITS:
            raise DelayUnitInvalid(delay.unit, DELAY_UNITS)
        amount = coerce_delay_amount(delay.amount)
        return {"delay": {"amount": amount, "unit": unit}}

    # ── Step 3: content ──────────────────────────────────

    async def _render(self, content: TemplateContent) -> tuple[str, str]:
        """Render a template through validation.

        Raises:
            UnknownTemplate, ValidationFailed, RenderFailed.
        """
        outcome = await self.renderer.render_with_validation(
            content.template_name, content.props,
        )
        if not outcome.success:
            raise self.renderer.error_for(outcome)
        return outcome.html or "", outcome.text or ""

    # ── Step 4: provider envelopes ───────────────────────

    async def _build_email(self, request: NotificationRequest) -> EmailMessage:
        content = request.content
        text: Optional[str] = None
        if isinstance(content, TemplateContent):
            html, text = await self._render(content)
        else:
            html = content.body
        return EmailMessage(
            from_email=self.from_email,
            to=request.recipient.email,
            subject=content.subject,
            html=html,
            text=text,
        )

    async def _build_email_event(
        self,
        request: NotificationRequest,
        overrides: Optional[dict[str, Any]],
    ) -> WorkflowEvent:
        content = request.content
        payload: dict[str, Any] = {"subject": content.subject}
        if isinstance(content, TemplateContent):
            html, _ = await self._render(content)
            # Workflow payloads carry rendered HTML base64-encoded
            payload["content"] = base64.b64encode(html.encode("utf-8")).decode("ascii")
            payload["contentEncoding"] = "base64"
        else:
            payload["content"] = content.body

        workflow_id = self.workflows.delayed_email if overrides else self.workflows.email
        return WorkflowEvent(
            workflow_id=workflow_id,
            to={
                "subscriberId": request.recipient.user_id,
                "email": request.recipient.email,
            },
            payload=payload,
            overrides=overrides,
        )

    def _build_push_event(
        self,
        request: NotificationRequest,
        overrides: Optional[dict[str, Any]],
    ) -> WorkflowEvent:
        content = request.content
        if not isinstance(content, LiteralContent):
            raise ValidationFailed(["templates are only supported on email channels"])

        to: dict[str, Any] = {"subscriberId": request.recipient.user_id}
        token = request.recipient.device_token
        if token:
            # One-shot credential override; no prior registration needed
            to["channels"] = [{
                "providerId": self.push_provider_id,
                "credentials": {"deviceTokens": [token]},
            }]

        workflow_id = (
            self.workflows.delayed_push
            if request.channel is Channel.PUSH_DELAYED
            else self.workflows.push
        )
        return WorkflowEvent(
            workflow_id=workflow_id,
            to=to,
            payload={
                "title": content.subject,
                "body": content.body,
                "data": dict(content.data or {}),
            },
            overrides=overrides,
        )

    # ── Step 5: result ───────────────────────────────────

    def _normalize(
        self,
        request: NotificationRequest,
        provider: str,
        response: Optional[Mapping[str, Any]],
        reference_field: str,
    ) -> DispatchResult:
        reference = (response or {}).get(reference_field)
        reference = str(reference) if reference not in (None, "") else None
        if reference is None:
            logger.warning(
                "%s accepted %s without a reference",
                provider, request.channel.value,
            )
        logger.info(
            "Dispatched %s to %s via %s (ref=%s)",
            request.channel.value,
            request.recipient.user_id or request.recipient.email,
            provider, reference,
        )
        return DispatchResult.delivered(request.channel, provider, reference)
