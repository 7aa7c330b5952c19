"""Notify Gateway — Email Renderer.

Renders registered templates to HTML and plain text. The entry point
for dispatch and preview is render_with_validation(), which always runs
the validator first so a bag is never rendered unchecked.

HTML and text renders are independent; render_both() runs them
concurrently in worker threads over a single snapshot of the bag.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any, Optional

from notify_gateway.emails.models import PropertyBag, RenderedContent, RenderOutcome
from notify_gateway.emails.registry import DEFAULT_REGISTRY, TemplateRegistry
from notify_gateway.emails.text import html_to_text
from notify_gateway.emails.validator import validate
from notify_gateway.errors import (
    GatewayError,
    RenderFailed,
    UnknownTemplate,
    ValidationFailed,
)
from notify_gateway.utils.logger import get_logger

logger = get_logger(__name__)


def _snapshot(props: Optional[PropertyBag]) -> dict[str, Any]:
    """Deep copy of the bag so both renders see the same input."""
    return copy.deepcopy(dict(props or {}))


class EmailRenderer:
    """Renders templates from a TemplateRegistry.

    Attributes:
        registry: Template registry used for lookups.
    """

    def __init__(self, registry: Optional[TemplateRegistry] = None) -> None:
        self.registry = registry or DEFAULT_REGISTRY

    def render_html(self, template_name: str, props: Optional[PropertyBag] = None) -> str:
        """Render a template to an HTML document.

        Raises:
            UnknownTemplate: If the template is not registered.
        """
        definition = self.registry.get(template_name)
        html = definition.render_html(props or {})
        logger.debug(
            "Rendered %s HTML (%d chars)", template_name, len(html),
        )
        return html

    def render_text(self, template_name: str, props: Optional[PropertyBag] = None) -> str:
        """Render a template to plain text.

        Raises:
            UnknownTemplate: If the template is not registered.
        """
        return html_to_text(self.render_html(template_name, props))

    async def render_both(
        self,
        template_name: str,
        props: Optional[PropertyBag] = None,
    ) -> RenderedContent:
        """Render HTML and text concurrently from one bag snapshot.

        Raises:
            UnknownTemplate: If the template is not registered.
        """
        self.registry.get(template_name)
        snapshot = _snapshot(props)
        html, text = await asyncio.gather(
            asyncio.to_thread(self.render_html, template_name, snapshot),
            asyncio.to_thread(self.render_text, template_name, snapshot),
        )
        return RenderedContent(html=html, text=text)

    async def render_with_validation(
        self,
        template_name: str,
        props: Optional[PropertyBag] = None,
    ) -> RenderOutcome:
        """Validate, then render both representations.

        Never raises for expected failures: unknown templates,
        validation errors and render exceptions come back as an
        unsuccessful RenderOutcome with an error tag.

        Args:
            template_name: Registered template identifier.
            props: Property bag.

        Returns:
            RenderOutcome with html/text on success, errors otherwise.
        """
        if template_name not in self.registry:
            error = UnknownTemplate(str(template_name), self.registry.names())
            logger.warning("Render rejected: %s", error.message)
            return RenderOutcome(
                success=False,
                template_name=str(template_name),
                errors=(error.message,),
                error=error.tag,
            )

        validation = validate(template_name, props, self.registry)
        if not validation.is_valid:
            logger.info(
                "Validation failed for %s: %s",
                template_name, "; ".join(validation.errors),
            )
            return RenderOutcome(
                success=False,
                template_name=template_name,
                errors=validation.errors,
                error=ValidationFailed.tag,
            )

        try:
            rendered = await self.render_both(template_name, props)
        except Exception as e:
            logger.error("Rendering %s failed: %s", template_name, e)
            return RenderOutcome(
                success=False,
                template_name=template_name,
                errors=(f"Failed to render template {template_name}: {e}",),
                error=RenderFailed.tag,
            )

        logger.info(
            "Template %s rendered (html=%d chars, text=%d chars)",
            template_name, len(rendered.html), len(rendered.text),
        )
        return RenderOutcome(
            success=True,
            template_name=template_name,
            html=rendered.html,
            text=rendered.text,
        )

    def error_for(self, outcome: RenderOutcome) -> GatewayError:
        """Exception matching a failed RenderOutcome.

        Args:
            outcome: An unsuccessful result of render_with_validation().

        Returns:
            UnknownTemplate (details = valid names), ValidationFailed
            (details = errors) or RenderFailed.
        """
        if outcome.error == UnknownTemplate.tag:
            return UnknownTemplate(outcome.template_name, self.registry.names())
        if outcome.error == ValidationFailed.tag:
            return ValidationFailed(outcome.errors)
        return RenderFailed("; ".join(outcome.errors) or "template rendering failed")

    def available_templates(self) -> list[str]:
        """Template names in catalog order."""
        return self.registry.names()
