"""Notify Gateway — Provider Contracts.

The dispatcher talks to two kinds of provider, both injected at
construction:

  - EmailSender: direct email API, one message per call
  - WorkflowTrigger: executes a named delivery workflow for a subscriber

Implementations raise ProviderNotConfigured before any network call
when credentials are absent, and ProviderError for every transport or
provider-side failure. They never retry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol


@dataclass(frozen=True)
class EmailMessage:
    """A single email for the direct email provider."""

    from_email: str
    to: str
    subject: str
    html: str
    text: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "from": self.from_email,
            "to": self.to,
            "subject": self.subject,
            "html": self.html,
        }
        if self.text:
            payload["text"] = self.text
        return payload


@dataclass(frozen=True)
class WorkflowEvent:
    """Trigger envelope for the workflow provider.

    Attributes:
        workflow_id: Workflow to execute.
        to: Subscriber reference: subscriberId, optional email and
            optional one-shot channel credentials.
        payload: Workflow payload.
        overrides: Provider overrides, e.g. {"delay": {...}}.
    """

    workflow_id: str
    to: dict[str, Any]
    payload: dict[str, Any] = field(default_factory=dict)
    overrides: Optional[dict[str, Any]] = None

    def to_payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "name": self.workflow_id,
            "to": self.to,
            "payload": self.payload,
        }
        if self.overrides:
            body["overrides"] = self.overrides
        return body


class EmailSender(Protocol):
    """Direct email provider."""

    name: str

    async def send_email(self, message: EmailMessage) -> Mapping[str, Any]:
        """Send one email; returns the provider response (may carry "id")."""
        ...


class WorkflowTrigger(Protocol):
    """Workflow-trigger provider."""

    name: str

    async def trigger(self, event: WorkflowEvent) -> Mapping[str, Any]:
        """Trigger a workflow; returns the response data (may carry "transactionId")."""
        ...

    async def health_check(self) -> Mapping[str, Any]:
        """Report connectivity: {"status": ..., "service": ...}."""
        ...
