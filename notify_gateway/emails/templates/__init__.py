"""Notify Gateway — Built-in Email Templates.

Adding a template means adding one module with a DEFINITION and listing
it here; registry order follows this tuple.
"""

from notify_gateway.emails.templates import confirmation, newsletter, welcome

BUILTIN_TEMPLATES = (
    welcome.DEFINITION,
    confirmation.DEFINITION,
    newsletter.DEFINITION,
)

__all__ = ["BUILTIN_TEMPLATES"]
