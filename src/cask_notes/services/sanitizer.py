"""Allow-list sanitization of rich post content.

This is the only defense against stored cross-site scripting, so it runs on
every write path that accepts HTML (create and update), not on rendering.
``sanitize_content`` is idempotent: sanitizing already-sanitized content is a
no-op.
"""

from __future__ import annotations

import html
import re
from collections.abc import Iterator
from typing import Any

import bleach
from bleach.css_sanitizer import CSSSanitizer
from bleach.html5lib_shim import Filter
from bleach.sanitizer import Cleaner

_ALIGNABLE_TAGS: tuple[str, ...] = (
    "p",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "div",
    "span",
    "blockquote",
    "li",
    "th",
    "td",
)

_ALLOWED_TAGS: frozenset[str] = frozenset(
    {
        # structure
        "p",
        "br",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "ul",
        "ol",
        "li",
        "table",
        "thead",
        "tbody",
        "tfoot",
        "tr",
        "th",
        "td",
        "blockquote",
        "code",
        "pre",
        "hr",
        # inline
        "strong",
        "b",
        "em",
        "i",
        "u",
        "s",
        "strike",
        "mark",
        "span",
        # media, links, containers
        "img",
        "a",
        "div",
    }
)


def _build_attributes() -> dict[str, list[str]]:
    attributes: dict[str, list[str]] = {tag: ["style"] for tag in _ALIGNABLE_TAGS}
    attributes["a"] = ["href", "name", "target", "rel"]
    attributes["img"] = ["src", "alt", "title", "width", "height", "class"]
    attributes["th"] = [*attributes["th"], "colspan", "rowspan"]
    attributes["td"] = [*attributes["td"], "colspan", "rowspan"]
    return attributes


_ALLOWED_ATTRIBUTES: dict[str, list[str]] = _build_attributes()
_ALLOWED_PROTOCOLS: frozenset[str] = frozenset({"http", "https", "mailto"})
_ALLOWED_ALIGNMENTS: frozenset[str] = frozenset({"left", "right", "center", "justify"})

LINK_REL = "noopener noreferrer"
DEFAULT_LINK_TARGET = "_blank"

_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")
_PATH_RELATIVE_PREFIXES: tuple[str, ...] = ("/", "./", "../", "#", "?")
_TAG_RE = re.compile(r"<[^>]*>")

_HREF = (None, "href")
_SRC = (None, "src")
_REL = (None, "rel")
_TARGET = (None, "target")
_STYLE = (None, "style")


def _is_protocol_relative(value: str) -> bool:
    # Browsers treat backslashes like slashes in this position.
    return value[:2] in ("//", "\\\\", "/\\", "\\/")


def normalize_href(value: str) -> str | None:
    """Return the href to keep for an anchor, or None to drop it.

    Path-relative references are left untouched; bare domains such as
    ``www.example.com`` get an ``https://`` prefix.
    """
    href = value.strip()
    if not href:
        return None
    if _is_protocol_relative(href):
        return None
    match = _SCHEME_RE.match(href)
    if match:
        return href if match.group(1).lower() in _ALLOWED_PROTOCOLS else None
    if href.startswith(_PATH_RELATIVE_PREFIXES):
        return href
    if "." in href:
        return f"https://{href}"
    return href


def normalize_text_align(style: str) -> str | None:
    """Reduce a style attribute to a single allowed ``text-align`` declaration."""
    alignment: str | None = None
    for declaration in style.split(";"):
        name, sep, value = declaration.partition(":")
        if not sep or name.strip().lower() != "text-align":
            continue
        candidate = value.strip().lower()
        if candidate in _ALLOWED_ALIGNMENTS:
            alignment = candidate
    if alignment is None:
        return None
    return f"text-align: {alignment};"


class ContentNormalizingFilter(Filter):
    """html5lib filter applied after bleach's allow-list pass."""

    def __iter__(self) -> Iterator[dict[str, Any]]:
        for token in Filter.__iter__(self):
            if token["type"] in ("StartTag", "EmptyTag"):
                attrs = token.get("data")
                if attrs is None:
                    attrs = {}
                    token["data"] = attrs
                if _STYLE in attrs:
                    style = normalize_text_align(attrs[_STYLE])
                    if style is None:
                        del attrs[_STYLE]
                    else:
                        attrs[_STYLE] = style
                if token["name"] == "a":
                    self._normalize_anchor(attrs)
                elif token["name"] == "img" and _SRC in attrs:
                    if _is_protocol_relative(attrs[_SRC].strip()):
                        del attrs[_SRC]
            yield token

    @staticmethod
    def _normalize_anchor(attrs: dict[tuple[str | None, str], str]) -> None:
        if _HREF in attrs:
            href = normalize_href(attrs[_HREF])
            if href is None:
                del attrs[_HREF]
            else:
                attrs[_HREF] = href
        attrs[_REL] = LINK_REL
        if not attrs.get(_TARGET, "").strip():
            attrs[_TARGET] = DEFAULT_LINK_TARGET


_cleaner = Cleaner(
    tags=_ALLOWED_TAGS,
    attributes=_ALLOWED_ATTRIBUTES,
    protocols=_ALLOWED_PROTOCOLS,
    strip=True,
    strip_comments=True,
    css_sanitizer=CSSSanitizer(allowed_css_properties=["text-align"]),
    filters=[ContentNormalizingFilter],
)


def sanitize_content(raw_html: str | None) -> str:
    """Sanitize user-submitted rich HTML before it is persisted.

    Args:
        raw_html: Editor output, possibly hostile.

    Returns:
        HTML containing only allow-listed tags, attributes, schemes and styles.
    """
    if not raw_html:
        return ""
    return _cleaner.clean(raw_html)


def plain_text_from_html(value: str | None) -> str:
    """Return the visible text of ``value`` with whitespace collapsed."""
    text = html.unescape(_TAG_RE.sub(" ", value or ""))
    return " ".join(text.split())


def sanitize_plain_text(value: str | None) -> str:
    """Remove all markup from short text fields such as comments and author names."""
    return bleach.clean(value or "", tags=set(), attributes={}, strip=True).strip()


__all__ = [
    "sanitize_content",
    "plain_text_from_html",
    "sanitize_plain_text",
    "normalize_href",
    "normalize_text_align",
    "LINK_REL",
    "DEFAULT_LINK_TARGET",
]
