"""Notify Gateway — Email Template Models.

Value types shared by the template registry, the validator and the
renderer. Templates form a closed set of variants: each one is a
TemplateDefinition holding a pure HTML render function plus the rules
used to validate its property bag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from notify_gateway.emails.text import html_to_text

PropertyBag = Mapping[str, Any]


@dataclass(frozen=True)
class RenderedContent:
    """HTML and plain-text renderings of the same content.

    Attributes:
        html: Full HTML document.
        text: Plain-text equivalent of `html`.
    """

    html: str
    text: str


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of checking a property bag against a template.

    Attributes:
        errors: Ordered, human-readable violations. Empty iff valid.
    """

    errors: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        """True when no violations were found."""
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {"isValid": self.is_valid, "errors": list(self.errors)}


@dataclass(frozen=True)
class RenderOutcome:
    """Result of render-with-validation (preview and dispatch entry point).

    Attributes:
        success: True when validation passed and both renders succeeded.
        template_name: Template that was requested.
        html: Rendered HTML, only on success.
        text: Rendered plain text, only on success.
        errors: Validation or render errors, only on failure.
        error: Failure tag (UnknownTemplate, ValidationFailed,
            RenderFailed), only on failure.
    """

    success: bool
    template_name: str
    html: Optional[str] = None
    text: Optional[str] = None
    errors: tuple[str, ...] = ()
    error: Optional[str] = None


@dataclass(frozen=True)
class TemplateDefinition:
    """A named, parameterized email template.

    Attributes:
        name: Unique identifier within the registry.
        required_fields: Fields that must be present and truthy, in the
            order their errors are reported.
        render_html: Pure function from property bag to HTML document.
        description: One-line catalog description.
        shape_check: Optional template-specific type checks, returning
            violation messages. Runs after the presence checks.
    """

    name: str
    required_fields: tuple[str, ...]
    render_html: Callable[[PropertyBag], str]
    description: str = "No description available"
    shape_check: Optional[Callable[[PropertyBag], list[str]]] = field(
        default=None, compare=False,
    )

    def render(self, props: PropertyBag) -> RenderedContent:
        """Render both representations sequentially.

        Args:
            props: Property bag (read-only).

        Returns:
            RenderedContent with HTML and derived plain text.
        """
        html = self.render_html(props)
        return RenderedContent(html=html, text=html_to_text(html))
