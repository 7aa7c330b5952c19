"""Notify Gateway — Resend Email Client.

Async client for the Resend email API, built on httpx.AsyncClient.
One POST per message, no retries: failures surface as ProviderError
and retrying is left to the caller.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from notify_gateway.config import EmailConfig
from notify_gateway.errors import ProviderError, ProviderNotConfigured
from notify_gateway.providers.base import EmailMessage
from notify_gateway.utils.logger import get_logger

logger = get_logger(__name__)


def _error_message(resp: httpx.Response) -> str:
    """Pull the provider's error message out of a failed response."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:300] or resp.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)[:300]
    return str(body)[:300]


class ResendEmailSender:
    """Direct email provider backed by the Resend REST API.

    Attributes:
        config: EmailConfig with api_key, base_url and timeout.
        name: Provider name ('resend').
        total_sent: Successful sends this session.
    """

    name = "resend"

    def __init__(
        self,
        config: EmailConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: EmailConfig from the app configuration.
            transport: Optional httpx transport (used to stub the API).
        """
        self.config = config
        self.total_sent = 0
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazily create the httpx.AsyncClient.

        Raises:
            ProviderNotConfigured: If the API key is missing.
        """
        if not self.config.api_key:
            raise ProviderNotConfigured("Resend", "RESEND_API_KEY")
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=httpx.Timeout(self.config.timeout_seconds),
                transport=self._transport,
            )
        return self._client

    async def send_email(self, message: EmailMessage) -> dict[str, Any]:
        """Send one email.

        Args:
            message: The message to send.

        Returns:
            Parsed JSON response, normally {"id": "<email id>"}.

        Raises:
            ProviderNotConfigured: If the API key is missing.
            ProviderError: On transport errors or non-2xx responses.
        """
        client = await self._get_client()

        try:
            resp = await client.post("/emails", json=message.to_payload())
        except httpx.TimeoutException as e:
            logger.error("Resend timeout sending to %s: %s", message.to, e)
            raise ProviderError(self.name, "request timed out") from e
        except httpx.HTTPError as e:
            logger.error("Resend network error sending to %s: %s", message.to, e)
            raise ProviderError(self.name, f"network error: {e}") from e

        if resp.status_code >= 400:
            detail = _error_message(resp)
            logger.error("Resend %d for %s: %s", resp.status_code, message.to, detail)
            raise ProviderError(self.name, detail, status=resp.status_code)

        try:
            data = resp.json() if resp.content else {}
        except ValueError:
            logger.warning("Resend returned a non-JSON body (status %d)", resp.status_code)
            data = {}
        if not isinstance(data, dict):
            logger.warning("Resend returned a non-object body: %r", data)
            data = {}

        self.total_sent += 1
        logger.info("Resend accepted email to %s (id=%s)", message.to, data.get("id"))
        return data

    async def close(self) -> None:
        """Close the underlying httpx client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug("Resend client closed (total sent: %d)", self.total_sent)

    async def __aenter__(self) -> "ResendEmailSender":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
