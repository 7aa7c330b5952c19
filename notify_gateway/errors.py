"""Notify Gateway — Error Taxonomy.

Every failure the gateway can report carries a machine-readable tag.
The dispatcher and the preview path convert these exceptions into
structured results; they never escape to an HTTP client as raw faults.
"""

from __future__ import annotations

from typing import Iterable, Sequence


class GatewayError(Exception):
    """Base class for all expected gateway failures.

    Attributes:
        tag: Machine-readable error identifier used in responses.
        details: Optional structured payload (field names, errors, ...).
    """

    tag = "GatewayError"

    def __init__(self, message: str, details: Sequence[str] | None = None) -> None:
        self.message = message
        self.details: list[str] = list(details or [])
        super().__init__(message)


class MissingFields(GatewayError):
    """Request lacks fields required for its channel or template."""

    tag = "MissingFields"

    def __init__(self, fields: Iterable[str]) -> None:
        self.fields = list(fields)
        super().__init__(
            f"Missing required fields: {', '.join(self.fields)}",
            details=self.fields,
        )


class UnknownTemplate(GatewayError):
    """Template identifier is not in the registry."""

    tag = "UnknownTemplate"

    def __init__(self, name: str, available: Iterable[str]) -> None:
        self.name = name
        self.available = list(available)
        super().__init__(
            f'Template "{name}" not found. '
            f"Available templates: {', '.join(self.available)}",
            details=self.available,
        )


class ValidationFailed(GatewayError):
    """Property bag or request values fail the validation rules."""

    tag = "ValidationFailed"

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        super().__init__(
            f"Validation failed: {'; '.join(self.errors)}",
            details=self.errors,
        )


class RenderFailed(GatewayError):
    """A template raised while rendering a bag that passed validation."""

    tag = "RenderFailed"


class DelayUnitInvalid(GatewayError):
    """Delay unit is not one of the recognized units."""

    tag = "DelayUnitInvalid"

    def __init__(self, unit: object, allowed: Iterable[str]) -> None:
        self.unit = unit
        self.allowed = list(allowed)
        super().__init__(
            f"Invalid delay unit {unit!r}. Allowed units: {', '.join(self.allowed)}",
            details=self.allowed,
        )


class ProviderNotConfigured(GatewayError):
    """Provider credentials are absent; raised before any network call."""

    tag = "ProviderNotConfigured"

    def __init__(self, provider: str, setting: str) -> None:
        self.provider = provider
        self.setting = setting
        super().__init__(f"{provider} is not configured: {setting} is required")


class ProviderError(GatewayError):
    """The downstream provider rejected or failed the call."""

    tag = "ProviderError"

    def __init__(self, provider: str, message: str, status: int | None = None) -> None:
        self.provider = provider
        self.status = status
        super().__init__(f"{provider}: {message}")
