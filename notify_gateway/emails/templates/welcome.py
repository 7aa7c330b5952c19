"""Welcome email for newly created accounts."""

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
    "loginUrl": "#",
    "supportEmail": "support@company.com",
}

_SOURCE = """\
{% extends "layout.html" %}
{% block content %}
<h1 style="{{ styles.heading }}">Welcome to {{ companyName }}, {{ firstName }}! 🎉</h1>
<p style="{{ styles.paragraph }}">We're thrilled to have you on board! Your account has been successfully created, and you're ready to start exploring all the amazing features we have to offer.</p>
<div style="{{ styles.button_container }}">
<a href="{{ loginUrl }}" style="{{ styles.button }}">Get Started</a>
</div>
<p style="{{ styles.paragraph }}">If you have any questions or need help getting started, don't hesitate to reach out to our support team at <a href="mailto:{{ supportEmail }}" style="{{ styles.link }}">{{ supportEmail }}</a>.</p>
<hr style="{{ styles.hr }}">
<p style="{{ styles.paragraph }}"><strong>What's next?</strong></p>
<p style="{{ styles.paragraph }}">✅ Complete your profile</p>
<p style="{{ styles.paragraph }}">✅ Explore the dashboard</p>
<p style="{{ styles.paragraph }}">✅ Set up your preferences</p>
{% endblock %}
{% block footer %}
<p style="{{ styles.footer_text }}">Best regards,<br>The {{ companyName }} Team</p>
{% endblock %}
"""

_TEMPLATE = compile_template(_SOURCE)


def render_html(props: PropertyBag) -> str:
    context = layout_context(with_defaults(props, DEFAULTS))
    context["preview"] = f"Welcome to {context['companyName']}! Let's get you started."
    return _TEMPLATE.render(context)


DEFINITION = TemplateDefinition(
    name="welcome",
    required_fields=("firstName", "loginUrl"),
    render_html=render_html,
    description="Welcome email for new users with onboarding information",
)
