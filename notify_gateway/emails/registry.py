"""Notify Gateway — Template Registry.

Maps template names to their definitions. Built once at startup and
never mutated afterwards, so concurrent readers need no locking.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator

from notify_gateway.emails.models import TemplateDefinition
from notify_gateway.emails.templates import BUILTIN_TEMPLATES
from notify_gateway.errors import UnknownTemplate
from notify_gateway.utils.logger import get_logger

logger = get_logger(__name__)


class TemplateRegistry:
    """Immutable name → TemplateDefinition lookup.

    Iteration and names() follow insertion order.
    """

    def __init__(self, definitions: Iterable[TemplateDefinition]) -> None:
        """Build the registry.

        Args:
            definitions: Template definitions, in catalog order.

        Raises:
            ValueError: If two definitions share a name.
        """
        table: dict[str, TemplateDefinition] = {}
        for definition in definitions:
            if definition.name in table:
                raise ValueError(f"Duplicate template name: {definition.name}")
            table[definition.name] = definition
        self._templates = MappingProxyType(table)
        logger.debug("Template registry ready: %s", ", ".join(table))

    def get(self, name: str) -> TemplateDefinition:
        """Look up a template by name.

        Raises:
            UnknownTemplate: Carries the unknown name and the valid names.
        """
        try:
            return self._templates[name]
        except (KeyError, TypeError):
            raise UnknownTemplate(str(name), self.names()) from None

    def names(self) -> list[str]:
        """Registered template names in insertion order."""
        return list(self._templates)

    def describe(self) -> list[dict[str, str]]:
        """Catalog entries: name plus one-line description."""
        return [
            {"name": d.name, "description": d.description}
            for d in self._templates.values()
        ]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._templates

    def __iter__(self) -> Iterator[TemplateDefinition]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)


def build_default_registry() -> TemplateRegistry:
    """Registry holding the built-in templates (welcome, confirmation, newsletter)."""
    return TemplateRegistry(BUILTIN_TEMPLATES)


DEFAULT_REGISTRY = build_default_registry()
