"""Notify Gateway — HTML to Plain Text.

Derives the plain-text alternative of a rendered email from its HTML,
using selectolax for parsing. Block elements become line breaks, links
keep their target as `text [url]`, and anything marked
data-skip-in-text (the inbox preview line) is dropped.
"""

from __future__ import annotations

import re

from selectolax.parser import HTMLParser, Node

_BLOCK_TAGS = frozenset({
    "address", "article", "blockquote", "div", "footer", "h1", "h2", "h3",
    "h4", "h5", "h6", "header", "li", "ol", "p", "section", "table",
    "tbody", "td", "tr", "ul",
})
_DROP_TAGS = ["head", "style", "script", "title", "img"]
_WS_RE = re.compile(r"[ \t\r\f\v\n]+")
_RULE = "-" * 40


def _node_text(node: Node) -> str:
    """Collapse whitespace in a text node."""
    return _WS_RE.sub(" ", node.text(deep=False) or "")


def _walk(node: Node, out: list[str]) -> None:
    child = node.child
    while child is not None:
        tag = child.tag
        if tag == "-text":
            out.append(_node_text(child))
        elif tag == "br":
            out.append("\n")
        elif tag == "hr":
            out.append(f"\n{_RULE}\n")
        elif tag == "a":
            label_parts: list[str] = []
            _walk(child, label_parts)
            label = "".join(label_parts).strip()
            href = (child.attributes.get("href") or "").strip()
            if href.startswith("mailto:") and href[len("mailto:"):] == label:
                out.append(label)
            elif href and href != "#" and href != label:
                out.append(f"{label} [{href}]" if label else href)
            else:
                out.append(label)
        elif tag in _BLOCK_TAGS:
            out.append("\n")
            _walk(child, out)
            out.append("\n")
        elif not tag.startswith("-"):
            _walk(child, out)
        child = child.next


def _tidy(raw: str) -> str:
    """Strip every line and collapse runs of blank lines to one."""
    lines: list[str] = []
    blank = False
    for line in raw.split("\n"):
        line = line.strip()
        if not line:
            if lines and not blank:
                lines.append("")
            blank = True
            continue
        lines.append(line)
        blank = False
    return "\n".join(lines).strip()


def html_to_text(html: str) -> str:
    """Convert an HTML email document to readable plain text.

    Args:
        html: Rendered HTML document.

    Returns:
        Plain text with one paragraph per block; empty string for
        empty input.
    """
    if not html:
        return ""

    tree = HTMLParser(html)
    for hidden in tree.css("[data-skip-in-text]"):
        hidden.decompose()
    tree.strip_tags(_DROP_TAGS)

    root = tree.body or tree.root
    if root is None:
        return ""

    parts: list[str] = []
    _walk(root, parts)
    return _tidy("".join(parts))
