"""Newsletter email: a list of articles plus a call-to-action section.

When no articles are supplied, two built-in placeholder articles are
rendered so the layout is always complete.
"""

from __future__ import annotations

from typing import Any, Mapping

from notify_gateway.emails.models import PropertyBag, TemplateDefinition
from notify_gateway.emails.templates.base import (
    compile_template,
    layout_context,
    with_defaults,
)

DEFAULTS = {
    "firstName": "User",
    "companyName": "Your Company",
    "unsubscribeUrl": "#",
    "webViewUrl": "#",
}

_ARTICLE_IMAGE = "https://via.placeholder.com/400x200/E5E7EB/6B7280?text={label}"

DEFAULT_ARTICLES: tuple[dict[str, str], ...] = (
    {
        "title": "New Feature Release: Enhanced Dashboard",
        "summary": "We've redesigned our dashboard to make it more intuitive and powerful.",
        "readMoreUrl": "#",
        "imageUrl": _ARTICLE_IMAGE.format(label="Article+Image"),
    },
    {
        "title": "Customer Success Story",
        "summary": "See how Company X increased their productivity by 40% using our platform.",
        "readMoreUrl": "#",
        "imageUrl": _ARTICLE_IMAGE.format(label="Success+Story"),
    },
)

_SOURCE = """\
{% extends "layout.html" %}
{% block header_extra %}
<p style="{{ styles.heading }}">Weekly Newsletter</p>
{% endblock %}
{% block content %}
<p style="{{ styles.small }}">Can't see this email properly? <a href="{{ webViewUrl }}" style="{{ styles.link }}">View in browser</a></p>
<p style="{{ styles.heading }}">Hi {{ firstName }}! 👋</p>
<p style="{{ styles.paragraph }}">Welcome to this week's newsletter! Here are the latest updates, features, and stories we think you'll find interesting.</p>
<hr style="{{ styles.hr }}">
{% for article in articles %}
<div>
{% if article.imageUrl %}
<img src="{{ article.imageUrl }}" alt="{{ article.title }}" width="400" height="200" style="width:100%;border-radius:8px;">
{% endif %}
<p style="{{ styles.heading }}">{{ article.title }}</p>
{% if article.summary %}
<p style="{{ styles.paragraph }}">{{ article.summary }}</p>
{% endif %}
<div style="{{ styles.button_container }}">
<a href="{{ article.readMoreUrl }}" style="{{ styles.button }}">Read More</a>
</div>
</div>
{% if not loop.last %}
<hr style="{{ styles.hr }}">
{% endif %}
{% endfor %}
<hr style="{{ styles.hr }}">
<div>
<p style="{{ styles.heading }}">Ready to get more done?</p>
<p style="{{ styles.paragraph }}">Upgrade to our Pro plan and unlock advanced features that will supercharge your workflow.</p>
<div style="{{ styles.button_container }}">
<a href="#" style="{{ styles.button }}">Upgrade Now</a>
</div>
</div>
{% endblock %}
{% block footer %}
<p style="{{ styles.footer_text }}">Thanks for being part of the {{ companyName }} community!</p>
<p style="{{ styles.footer_text }}"><a href="{{ unsubscribeUrl }}" style="{{ styles.link }}">Unsubscribe</a> | <a href="#" style="{{ styles.link }}">Update Preferences</a></p>
{% endblock %}
"""

_TEMPLATE = compile_template(_SOURCE)


def _normalize_article(article: Any) -> dict[str, str]:
    """Coerce one article entry into the fields the template reads."""
    if not isinstance(article, Mapping):
        return {"title": str(article), "summary": "", "readMoreUrl": "#", "imageUrl": ""}
    return {
        "title": str(article.get("title") or ""),
        "summary": str(article.get("summary") or ""),
        "readMoreUrl": str(article.get("readMoreUrl") or "#"),
        "imageUrl": str(article.get("imageUrl") or ""),
    }


def check_shape(props: PropertyBag) -> list[str]:
    """Newsletter-specific type checks.

    `articles` is optional, but when supplied it must be a sequence.
    """
    articles = props.get("articles")
    if articles is not None and not isinstance(articles, (list, tuple)):
        return ["articles must be an array"]
    return []


def render_html(props: PropertyBag) -> str:
    context = layout_context(with_defaults(props, DEFAULTS))
    articles = context.get("articles")
    if isinstance(articles, (list, tuple)) and articles:
        context["articles"] = [_normalize_article(a) for a in articles]
    else:
        context["articles"] = [dict(a) for a in DEFAULT_ARTICLES]
    context["preview"] = f"Your weekly update from {context['companyName']}"
    return _TEMPLATE.render(context)


DEFINITION = TemplateDefinition(
    name="newsletter",
    required_fields=("firstName",),
    render_html=render_html,
    description="Newsletter template with articles and call-to-action",
    shape_check=check_shape,
)
