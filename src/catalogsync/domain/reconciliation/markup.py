"""Sanitize vendor-supplied rich text down to a safe tag subset."""

from __future__ import annotations

import re
from typing import Final
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Comment

ALLOWED_TAGS: Final[frozenset[str]] = frozenset(
    {
        "a", "abbr", "b", "blockquote", "br", "code", "dd", "div", "dl", "dt", "em",
        "h1", "h2", "h3", "h4", "h5", "h6", "hr", "i", "img", "li", "ol", "p", "pre",
        "small", "span", "strong", "sub", "sup", "table", "tbody", "td", "tfoot", "th",
        "thead", "tr", "u", "ul",
    }
)  # fmt: skip

# dropped together with their content
DROPPED_TAGS: Final[frozenset[str]] = frozenset(
    {"script", "style", "iframe", "object", "embed", "form", "input", "button", "textarea",
     "select", "noscript", "template", "svg", "math"}
)  # fmt: skip

ALLOWED_ATTRIBUTES: Final[dict[str, frozenset[str]]] = {
    "*": frozenset({"title"}),
    "a": frozenset({"href", "target", "rel"}),
    "img": frozenset({"src", "alt", "width", "height"}),
    "td": frozenset({"colspan", "rowspan"}),
    "th": frozenset({"colspan", "rowspan"}),
}

URL_ATTRIBUTES: Final[frozenset[str]] = frozenset({"href", "src"})
SAFE_URL_SCHEMES: Final[frozenset[str]] = frozenset({"", "http", "https", "mailto"})

_WHITESPACE_RE = re.compile(r"\s+")


def _is_safe_url(value: str) -> bool:
    # browsers ignore embedded whitespace/control chars in schemes ("java\tscript:")
    compact = "".join(ch for ch in value if ch.isprintable() and not ch.isspace())
    try:
        scheme = urlsplit(compact).scheme.lower()
    except ValueError:
        return False
    return scheme in SAFE_URL_SCHEMES


def _allowed_attributes(tag_name: str) -> frozenset[str]:
    return ALLOWED_ATTRIBUTES["*"] | ALLOWED_ATTRIBUTES.get(tag_name, frozenset())


def sanitize_html(markup: str) -> str:
    """Return ``markup`` with unsafe elements removed and attributes filtered.

    Disallowed but harmless tags are unwrapped so their text survives; scripts,
    styles, embeds and forms are removed with their content. Event handler
    attributes and ``javascript:`` URLs never survive.
    """

    if not markup.strip():
        return ""

    soup = BeautifulSoup(markup, "html.parser")

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for tag in soup.find_all(list(DROPPED_TAGS)):
        if not tag.decomposed:
            tag.decompose()

    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue
        allowed = _allowed_attributes(tag.name)
        kept: dict[str, str | list[str]] = {}
        for attr, value in tag.attrs.items():
            if attr.lower() not in allowed:
                continue
            text = " ".join(value) if isinstance(value, list) else str(value)
            if attr.lower() in URL_ATTRIBUTES and not _is_safe_url(text):
                continue
            kept[attr.lower()] = text
        tag.attrs = kept

    return str(soup).strip()


def plain_text(value: str) -> str:
    """Strip all markup and collapse whitespace, for single-line fields like names."""

    if not value:
        return ""
    text = BeautifulSoup(value, "html.parser").get_text(" ")
    return _WHITESPACE_RE.sub(" ", text).strip()
