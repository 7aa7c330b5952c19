"""Notify Gateway — Providers Package.

Components:
  - base: provider contracts and request envelopes
  - resend_client: direct email over the Resend API (httpx)
  - novu_client: workflow triggers over the Novu API (aiohttp)
  - memory: recording providers for dry-run mode and tests
"""

from notify_gateway.providers.base import (
    EmailMessage,
    EmailSender,
    WorkflowEvent,
    WorkflowTrigger,
)
from notify_gateway.providers.memory import InMemoryEmailSender, InMemoryWorkflowClient
from notify_gateway.providers.novu_client import NovuWorkflowClient
from notify_gateway.providers.resend_client import ResendEmailSender

__all__ = [
    "EmailMessage",
    "EmailSender",
    "WorkflowEvent",
    "WorkflowTrigger",
    "InMemoryEmailSender",
    "InMemoryWorkflowClient",
    "NovuWorkflowClient",
    "ResendEmailSender",
]
