"""Notify Gateway — In-Memory Providers.

Recording stand-ins for the real providers. Used in dry-run mode (no
message leaves the process) and by the test scripts, which inspect
`calls` to assert what was, or was not, sent.
"""

from __future__ import annotations

import itertools
from typing import Any, Optional

from notify_gateway.errors import ProviderError
from notify_gateway.providers.base import EmailMessage, WorkflowEvent
from notify_gateway.utils.logger import get_logger

logger = get_logger(__name__)


class _Recorder:
    """Shared call recording and failure priming."""

    name = "memory"

    def __init__(self, omit_reference: bool = False) -> None:
        self.calls: list[Any] = []
        self.omit_reference = omit_reference
        self._fail_with: Optional[Exception] = None
        self._ids = itertools.count(1)

    def fail_next(self, error: Optional[Exception] = None) -> None:
        """Make the next call raise `error` (a ProviderError by default)."""
        self._fail_with = error or ProviderError(self.name, "simulated provider failure")

    def _record(self, item: Any) -> None:
        self.calls.append(item)
        if self._fail_with is not None:
            error, self._fail_with = self._fail_with, None
            raise error

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    @property
    def call_count(self) -> int:
        return len(self.calls)


class InMemoryEmailSender(_Recorder):
    """Email sender that records messages instead of sending them."""

    name = "memory-email"

    async def send_email(self, message: EmailMessage) -> dict[str, Any]:
        self._record(message)
        logger.info("[dry-run] email to %s: %s", message.to, message.subject)
        if self.omit_reference:
            return {}
        return {"id": self._next_id("email")}


class InMemoryWorkflowClient(_Recorder):
    """Workflow trigger that records events instead of sending them."""

    name = "memory-workflow"

    async def trigger(self, event: WorkflowEvent) -> dict[str, Any]:
        self._record(event)
        logger.info(
            "[dry-run] workflow %s for %s",
            event.workflow_id, event.to.get("subscriberId"),
        )
        if self.omit_reference:
            return {"acknowledged": True}
        return {
            "acknowledged": True,
            "status": "processed",
            "transactionId": self._next_id("txn"),
        }

    async def health_check(self) -> dict[str, Any]:
        return {"status": "connected", "service": self.name}
