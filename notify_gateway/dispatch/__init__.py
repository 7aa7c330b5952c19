"""Notify Gateway — Dispatch Package.

Components:
  - models: request, channel, delay and result types
  - dispatcher: validation, rendering and provider routing
  - push_tokens: advisory user id → device token registry
"""

from notify_gateway.dispatch.dispatcher import NotificationDispatcher
from notify_gateway.dispatch.models import (
    DELAY_UNITS,
    Channel,
    Delay,
    DispatchResult,
    LiteralContent,
    NotificationRequest,
    Recipient,
    TemplateContent,
)
from notify_gateway.dispatch.push_tokens import PushTokenAck, PushTokenRegistry

__all__ = [
    "DELAY_UNITS",
    "Channel",
    "Delay",
    "DispatchResult",
    "LiteralContent",
    "NotificationRequest",
    "Recipient",
    "TemplateContent",
    "NotificationDispatcher",
    "PushTokenAck",
    "PushTokenRegistry",
]
