"""Notify Gateway — Shared Email Layout.

Jinja2 environment and the base layout every built-in email extends.
Autoescaping is always on, so values from a property bag can never
close a tag or inject markup. Templates are compiled once at import
and are read-only afterwards.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from jinja2 import DictLoader, Environment, StrictUndefined, Template

LOGO_URL = "https://via.placeholder.com/150x50/4F46E5/white?text=LOGO"

# Inline styles, shared by all templates
STYLES: dict[str, str] = {
    "main": "background-color:#f6f9fc;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,'Helvetica Neue',Ubuntu,sans-serif;margin:0;padding:0;",
    "container": "background-color:#ffffff;margin:0 auto;padding:20px 0 48px;margin-bottom:64px;max-width:600px;",
    "header": "padding:32px 48px;text-align:center;",
    "logo": "margin:0 auto;",
    "content": "padding:0 48px;",
    "heading": "font-size:28px;font-weight:bold;color:#1f2937;margin:16px 0;",
    "paragraph": "font-size:16px;line-height:26px;color:#374151;margin:16px 0;",
    "small": "font-size:14px;line-height:22px;color:#6b7280;margin:16px 0;",
    "link_text": "font-size:14px;color:#4f46e5;word-break:break-all;",
    "button_container": "text-align:center;margin:32px 0;",
    "button": "background-color:#4f46e5;border-radius:6px;color:#ffffff;font-size:16px;font-weight:bold;text-decoration:none;text-align:center;display:inline-block;padding:12px 24px;",
    "link": "color:#4f46e5;text-decoration:underline;",
    "hr": "border:none;border-top:1px solid #e5e7eb;margin:32px 0;",
    "footer": "padding:0 48px;",
    "footer_text": "font-size:14px;line-height:24px;color:#6b7280;text-align:center;margin:8px 0;",
}

_LAYOUT = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{{ preview }}</title>
</head>
<body style="{{ styles.main }}">
<div data-skip-in-text="true" style="display:none;overflow:hidden;line-height:1px;opacity:0;max-height:0;max-width:0">{{ preview }}</div>
<table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="{{ styles.container }}">
<tr><td style="{{ styles.header }}">
<img src="{{ logo_url }}" alt="{{ companyName }}" width="150" height="50" style="{{ styles.logo }}">
{% block header_extra %}{% endblock %}
</td></tr>
<tr><td style="{{ styles.content }}">
{% block content %}{% endblock %}
</td></tr>
<tr><td style="{{ styles.footer }}">
{% block footer %}{% endblock %}
<p style="{{ styles.footer_text }}">&copy; {{ year }} {{ companyName }}. All rights reserved.</p>
</td></tr>
</table>
</body>
</html>
"""

_env = Environment(
    loader=DictLoader({"layout.html": _LAYOUT}),
    autoescape=True,
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)


def compile_template(source: str) -> Template:
    """Compile a template source that may extend "layout.html"."""
    return _env.from_string(source)


def with_defaults(props: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Build a render context, filling absent or empty fields.

    A field counts as absent when it is missing, None or an empty
    string. The input mapping is not modified.

    Args:
        props: Caller-supplied property bag.
        defaults: Fallback value per field.

    Returns:
        New dict holding every default key plus any extra props.
    """
    context = dict(props)
    for key, fallback in defaults.items():
        if context.get(key) in (None, ""):
            context[key] = fallback
    return context


def layout_context(context: dict[str, Any]) -> dict[str, Any]:
    """Add the values the base layout reads.

    The copyright year comes from the wall clock unless `year` is
    supplied in the bag. `logoUrl` optionally replaces the placeholder
    logo.
    """
    context["styles"] = STYLES
    context["logo_url"] = context.get("logoUrl") or LOGO_URL
    if not context.get("year"):
        context["year"] = datetime.now().year
    return context
