"""Notify Gateway — Email Templates Package.

Components:
  - registry: immutable name → template lookup
  - validator: required-field and shape checks for property bags
  - renderer: HTML/text rendering with validation
  - text: HTML to plain-text conversion
"""

from notify_gateway.emails.models import (
    RenderedContent,
    RenderOutcome,
    TemplateDefinition,
    ValidationResult,
)
from notify_gateway.emails.registry import (
    DEFAULT_REGISTRY,
    TemplateRegistry,
    build_default_registry,
)
from notify_gateway.emails.renderer import EmailRenderer
from notify_gateway.emails.validator import validate

__all__ = [
    "RenderedContent",
    "RenderOutcome",
    "TemplateDefinition",
    "ValidationResult",
    "DEFAULT_REGISTRY",
    "TemplateRegistry",
    "build_default_registry",
    "EmailRenderer",
    "validate",
]
