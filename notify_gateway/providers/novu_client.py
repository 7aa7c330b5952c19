"""Notify Gateway — Novu Workflow Client.

Async client for the Novu REST API using aiohttp. Triggers named
workflows (push and workflow-routed email) and reports connectivity
for the health endpoints.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import aiohttp

from notify_gateway.config import WorkflowConfig
from notify_gateway.errors import ProviderError, ProviderNotConfigured
from notify_gateway.providers.base import WorkflowEvent
from notify_gateway.utils.logger import get_logger

logger = get_logger(__name__)

_TRIGGER_PATH = "/v1/events/trigger"
_WORKFLOWS_PATH = "/v1/workflows"


def _error_message(status: int, body: str) -> str:
    """Extract Novu's error message from a response body."""
    try:
        data = json.loads(body)
    except (ValueError, TypeError):
        return body[:300] or f"HTTP {status}"
    if isinstance(data, dict):
        message = data.get("message") or data.get("error") or data
        if isinstance(message, list):
            message = "; ".join(str(m) for m in message)
        return str(message)[:300]
    return str(data)[:300]


class NovuWorkflowClient:
    """Workflow-trigger provider backed by the Novu REST API.

    Attributes:
        config: WorkflowConfig with api_key, base_url and workflow ids.
        name: Provider name ('novu').
    """

    name = "novu"

    def __init__(self, config: WorkflowConfig) -> None:
        self.config = config
        self.total_triggered = 0
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_session(self) -> aiohttp.ClientSession:
        """Lazily create the aiohttp session with auth headers.

        Raises:
            ProviderNotConfigured: If the API key is missing.
        """
        if not self.config.api_key:
            raise ProviderNotConfigured("Novu", "NOVU_API_KEY")
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "Authorization": f"ApiKey {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
            )
            logger.debug("Novu client session created")
        return self._session

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        """Send one request and return the JSON `data` member.

        Raises:
            ProviderNotConfigured: If the API key is missing.
            ProviderError: On network errors or non-2xx responses.
        """
        session = self._get_session()
        try:
            async with session.request(
                method, f"{self.config.base_url}{path}", json=body, params=params,
            ) as resp:
                text = await resp.text()
                if resp.status >= 400:
                    detail = _error_message(resp.status, text)
                    logger.error("Novu %d on %s %s: %s", resp.status, method, path, detail)
                    raise ProviderError(self.name, detail, status=resp.status)
        except aiohttp.ClientError as e:
            logger.error("Novu network error on %s %s: %s", method, path, e)
            raise ProviderError(self.name, f"network error: {e}") from e
        except asyncio.TimeoutError as e:
            logger.error("Novu timeout on %s %s", method, path)
            raise ProviderError(self.name, "request timed out") from e

        if not text:
            return {}
        try:
            parsed = json.loads(text)
        except ValueError:
            logger.warning("Novu returned a non-JSON body on %s %s", method, path)
            return {}
        if isinstance(parsed, dict):
            data = parsed.get("data", parsed)
            return data if isinstance(data, dict) else {"items": data}
        return {}

    async def trigger(self, event: WorkflowEvent) -> dict[str, Any]:
        """Trigger a workflow for one subscriber.

        Args:
            event: Trigger envelope (workflow id, recipient, payload,
                optional overrides).

        Returns:
            Response data, normally {"acknowledged", "status",
            "transactionId"}.
        """
        data = await self._request("POST", _TRIGGER_PATH, event.to_payload())
        self.total_triggered += 1
        logger.info(
            "Novu workflow %s triggered for %s (transaction=%s)",
            event.workflow_id, event.to.get("subscriberId"), data.get("transactionId"),
        )
        return data

    async def health_check(self) -> dict[str, Any]:
        """Probe the API by listing at most one workflow.

        Returns:
            {"status": "connected"|"not_configured"|"error", "service": "novu", ...}
        """
        try:
            await self._request("GET", _WORKFLOWS_PATH, params={"limit": "1"})
            return {"status": "connected", "service": self.name}
        except ProviderNotConfigured as e:
            return {"status": "not_configured", "service": self.name, "error": e.message}
        except ProviderError as e:
            logger.warning("Novu health check failed: %s", e.message)
            return {"status": "error", "service": self.name, "error": e.message}

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None
            logger.debug("Novu client session closed")

    async def __aenter__(self) -> "NovuWorkflowClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
