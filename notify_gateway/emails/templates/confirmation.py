"""Email-address confirmation with a single call-to-action link."""

from __future__ import annotations

from notify_gateway.emails.models import PropertyBag, TemplateDefinition
from notify_gateway.emails.templates.base import (
    compile_template,
    layout_context,
    with_defaults,
)

DEFAULTS = {
    "firstName": "User",
    "companyName": "Your Company",
    "confirmUrl": "#",
    "expiresIn": "24 hours",
}

_SOURCE = """\
{% extends "layout.html" %}
{% block content %}
<h1 style="{{ styles.heading }}">Confirm Your Email Address 📧</h1>
<p style="{{ styles.paragraph }}">Hi {{ firstName }},</p>
<p style="{{ styles.paragraph }}">Thanks for signing up with {{ companyName }}! To complete your registration, please confirm your email address by clicking the button below.</p>
<div style="{{ styles.button_container }}">
<a href="{{ confirmUrl }}" style="{{ styles.button }}">Confirm Email Address</a>
</div>
<p style="{{ styles.paragraph }}">This confirmation link will expire in <strong>{{ expiresIn }}</strong>. If you didn't create an account with us, you can safely ignore this email.</p>
<hr style="{{ styles.hr }}">
<p style="{{ styles.small }}">If the button above doesn't work, you can copy and paste this link into your browser:</p>
<p style="{{ styles.link_text }}">{{ confirmUrl }}</p>
{% endblock %}
{% block footer %}
<p style="{{ styles.footer_text }}">Thanks,<br>The {{ companyName }} Team</p>
{% endblock %}
"""

_TEMPLATE = compile_template(_SOURCE)


def render_html(props: PropertyBag) -> str:
    context = layout_context(with_defaults(props, DEFAULTS))
    context["preview"] = "Please confirm your email address"
    return _TEMPLATE.render(context)


DEFINITION = TemplateDefinition(
    name="confirmation",
    required_fields=("firstName", "confirmUrl"),
    render_html=render_html,
    description="Email confirmation template with action button",
)
