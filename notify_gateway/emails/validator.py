"""Notify Gateway — Property Bag Validator.

Checks a property bag against a template's rules without rendering:
first presence of each required field (in schema order), then the
template's own shape checks. Pure and idempotent.
"""

from __future__ import annotations

from typing import Any, Optional

from notify_gateway.emails.models import PropertyBag, ValidationResult
from notify_gateway.emails.registry import DEFAULT_REGISTRY, TemplateRegistry
from notify_gateway.errors import UnknownTemplate


def is_missing(value: Any) -> bool:
    """A field is missing when absent, None, empty or otherwise falsy.

    Numeric zero and False count as missing as well, matching the
    truthiness rule used for required fields.
    """
    if isinstance(value, str):
        return not value.strip()
    return not value


def validate(
    template_name: str,
    props: Optional[PropertyBag],
    registry: Optional[TemplateRegistry] = None,
) -> ValidationResult:
    """Validate a property bag for a template.

    Args:
        template_name: Registered template identifier.
        props: Property bag to inspect (None is treated as empty).
        registry: Registry to resolve the template in. Defaults to the
            built-in registry.

    Returns:
        ValidationResult with one error per violation.
    """
    registry = registry or DEFAULT_REGISTRY
    try:
        definition = registry.get(template_name)
    except UnknownTemplate:
        return ValidationResult(errors=(f"Unknown template: {template_name}",))

    bag = props or {}
    errors = [
        f"{name} is required"
        for name in definition.required_fields
        if is_missing(bag.get(name))
    ]
    if definition.shape_check is not None:
        errors.extend(definition.shape_check(bag))

    return ValidationResult(errors=tuple(errors))
