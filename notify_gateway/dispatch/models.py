"""Notify Gateway — Dispatch Models.

Request and result types for the dispatcher. A NotificationRequest is
owned by the calling request scope and discarded after dispatch; a
DispatchResult is the terminal artifact handed back to the caller and
is never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union

from notify_gateway.errors import GatewayError

DELAY_UNITS: tuple[str, ...] = ("seconds", "minutes", "hours", "days")

INTERNAL_ERROR = "InternalError"


class Channel(str, Enum):
    """Delivery channel of a notification."""

    EMAIL_DIRECT = "email-direct"
    EMAIL_WORKFLOW = "email-workflow"
    PUSH_IMMEDIATE = "push-immediate"
    PUSH_DELAYED = "push-delayed"

    @property
    def is_email(self) -> bool:
        return self in (Channel.EMAIL_DIRECT, Channel.EMAIL_WORKFLOW)

    @property
    def requires_delay(self) -> bool:
        return self is Channel.PUSH_DELAYED

    @property
    def reference_key(self) -> str:
        """Response field naming the provider reference."""
        return "emailId" if self is Channel.EMAIL_DIRECT else "transactionId"


@dataclass(frozen=True)
class Delay:
    """Requested delivery delay, as supplied by the caller.

    Values are kept raw; the dispatcher coerces `amount` to a positive
    integer and checks `unit` against DELAY_UNITS before any provider
    call.
    """

    amount: Any
    unit: Any

    def describe(self) -> str:
        return f"{self.amount} {self.unit}"


@dataclass(frozen=True)
class Recipient:
    """Who to notify.

    Attributes:
        user_id: Subscriber identifier on the workflow provider.
        email: Address for email channels.
        device_token: Optional push token, attached just in time.
    """

    user_id: str = ""
    email: str = ""
    device_token: str = ""


@dataclass(frozen=True)
class LiteralContent:
    """Caller-supplied content.

    For email, `subject` and `body` are the subject line and HTML body.
    For push, they are the notification title and body; `data` is the
    optional custom payload delivered with the push.
    """

    subject: str = ""
    body: str = ""
    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TemplateContent:
    """Content rendered from a registered template (email only)."""

    template_name: str
    props: Mapping[str, Any] = field(default_factory=dict)
    subject: str = ""


Content = Union[LiteralContent, TemplateContent]


@dataclass(frozen=True)
class NotificationRequest:
    """A single request to notify one recipient over one channel."""

    channel: Channel
    recipient: Recipient
    content: Content
    delay: Optional[Delay] = None


@dataclass(frozen=True)
class DispatchResult:
    """Normalized outcome of a dispatch.

    A provider call that returns without a reference is still a
    success; `has_reference` is then False and no reference is
    reported.

    Attributes:
        success: Whether the provider call completed.
        channel: Channel the request targeted.
        provider: Provider that handled the call, on success.
        provider_reference: Email id or transaction id, when returned.
        error: Failure tag (MissingFields, ProviderError, ...).
        error_message: Human-readable failure description.
        details: Structured failure details (field names, errors, ...).
    """

    success: bool
    channel: Optional[Channel] = None
    provider: Optional[str] = None
    provider_reference: Optional[str] = None
    error: Optional[str] = None
    error_message: Optional[str] = None
    details: tuple[str, ...] = ()

    @property
    def has_reference(self) -> bool:
        return self.success and self.provider_reference is not None

    @classmethod
    def delivered(
        cls,
        channel: Channel,
        provider: str,
        reference: Optional[str],
    ) -> "DispatchResult":
        return cls(
            success=True,
            channel=channel,
            provider=provider,
            provider_reference=reference,
        )

    @classmethod
    def from_error(cls, channel: Optional[Channel], error: GatewayError) -> "DispatchResult":
        return cls(
            success=False,
            channel=channel,
            error=error.tag,
            error_message=error.message,
            details=tuple(error.details),
        )

    @classmethod
    def internal_error(cls, channel: Optional[Channel]) -> "DispatchResult":
        return cls(
            success=False,
            channel=channel,
            error=INTERNAL_ERROR,
            error_message="Internal error while dispatching notification",
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON shape used by the route layer."""
        if self.success:
            out: dict[str, Any] = {
                "success": True,
                "provider": self.provider,
                "hasReference": self.has_reference,
            }
            if self.has_reference and self.channel is not None:
                out[self.channel.reference_key] = self.provider_reference
            return out

        out = {
            "success": False,
            "error": self.error,
            "message": self.error_message,
        }
        if self.details:
            out["details"] = list(self.details)
        return out
