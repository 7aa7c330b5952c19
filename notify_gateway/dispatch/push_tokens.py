"""Notify Gateway — Push Token Registry.

Advisory, in-memory association of user ids with device push tokens.
Registering only acknowledges the token; the binding that matters
happens when a push is dispatched with the token attached. Either path
may be absent: pushes without a token rely on the subscriber record
already held by the workflow provider.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from notify_gateway.errors import MissingFields, ValidationFailed
from notify_gateway.utils.logger import get_logger

logger = get_logger(__name__)

PREVIEW_LENGTH = 20


@dataclass(frozen=True)
class PushTokenAck:
    """Acknowledgement returned by register()."""

    user_id: str
    token_preview: str
    note: str = "Token will be used when sending notifications"

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "token": self.token_preview,
            "note": self.note,
        }


def _as_text(field: str, value: Any) -> str:
    """Numbers are accepted as ids; None counts as empty."""
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValidationFailed([f"{field} must be a string"])
    return str(value)


def preview_token(token: str) -> str:
    """Truncate a token for confirmation display."""
    return f"{token[:PREVIEW_LENGTH]}..."


class PushTokenRegistry:
    """In-memory user id → push token map. Re-registering overwrites."""

    def __init__(self) -> None:
        self._tokens: dict[str, str] = {}

    def register(self, user_id: Any, token: Any) -> PushTokenAck:
        """Record a token for a user.

        Args:
            user_id: Subscriber identifier.
            token: Device push token.

        Returns:
            PushTokenAck with a truncated token.

        Raises:
            MissingFields: If either value is empty.
            ValidationFailed: If either value is not a string or number.
        """
        user_id, token = _as_text("userId", user_id), _as_text("token", token)
        missing = [
            name for name, value in (("userId", user_id), ("token", token))
            if not value.strip()
        ]
        if missing:
            raise MissingFields(missing)

        replaced = user_id in self._tokens
        self._tokens[user_id] = token
        logger.info(
            "Push token %s for user %s",
            "updated" if replaced else "registered", user_id,
        )
        return PushTokenAck(user_id=user_id, token_preview=preview_token(token))

    def lookup(self, user_id: str) -> Optional[str]:
        """Last token registered for a user, if any."""
        return self._tokens.get(user_id)

    def __len__(self) -> int:
        return len(self._tokens)
