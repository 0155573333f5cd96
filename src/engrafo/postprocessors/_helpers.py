"""Internal helpers shared across stage modules."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, cast
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from engrafo.core.document import ARTICLE_ROOT_SELECTOR
from engrafo.core.exceptions import StageError


# Elements whose text is not prose and must be left verbatim.
VERBATIM_TAGS: frozenset[str] = frozenset(
    {"code", "pre", "kbd", "samp", "script", "style", "math", "svg", "textarea"}
)


def coerce_attribute(value: Any) -> str | None:
    """Normalise a BeautifulSoup attribute value to a string when possible."""
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(value, Iterable):
        for item in value:
            if isinstance(item, str):
                return item
    return None


def gather_classes(value: Any) -> list[str]:
    """Return a list of classes extracted from a BeautifulSoup attribute."""
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Iterable) and not isinstance(value, (bytes, bytearray)):
        return [cast(str, item) for item in value if isinstance(item, str)]
    return []


def has_class(node: Tag, name: str) -> bool:
    """Return True when ``node`` carries the CSS class ``name``."""
    return name in gather_classes(node.get("class"))


def add_class(node: Tag, *names: str) -> None:
    """Append classes to ``node`` without duplicating existing ones."""
    classes = gather_classes(node.get("class"))
    for name in names:
        if name not in classes:
            classes.append(name)
    node["class"] = classes


def remove_classes(node: Tag, *names: str) -> None:
    """Drop classes from ``node``, removing the attribute once empty."""
    classes = [item for item in gather_classes(node.get("class")) if item not in names]
    if classes:
        node["class"] = classes
    elif "class" in node.attrs:
        del node["class"]


def require_article(soup: BeautifulSoup, stage: str) -> Tag:
    """Return the article root or fail the running stage."""
    article = soup.select_one(ARTICLE_ROOT_SELECTOR)
    if article is None:
        raise StageError(stage, f"Could not find {ARTICLE_ROOT_SELECTOR}")
    return article


def require_element(soup: BeautifulSoup, name: str, stage: str) -> Tag:
    """Return the first ``name`` element or fail the running stage."""
    node = soup.find(name)
    if not isinstance(node, Tag):
        raise StageError(stage, f"Document has no <{name}> element")
    return node


def ensure_head(soup: BeautifulSoup) -> Tag:
    """Return ``<head>``, creating it in front of ``<body>`` when missing."""
    head = soup.find("head")
    if isinstance(head, Tag):
        return head
    head = soup.new_tag("head")
    html = soup.find("html")
    if isinstance(html, Tag):
        html.insert(0, head)
    else:
        soup.insert(0, head)
    return head


def in_verbatim(node: Any) -> bool:
    """Return True when ``node`` sits below an element holding verbatim text."""
    parent = getattr(node, "parent", None)
    while parent is not None:
        if getattr(parent, "name", None) in VERBATIM_TAGS:
            return True
        parent = parent.parent
    return False


def text_of(node: Tag) -> str:
    """Return the whitespace-normalised text content of ``node``."""
    return " ".join(node.get_text(" ", strip=True).split())


def is_valid_url(url: str) -> bool:
    """Check whether a URL string has a valid scheme/netloc combination."""
    try:
        result = urlparse(url)
    except ValueError:
        return False
    return bool(result.scheme and result.netloc)


__all__ = [
    "VERBATIM_TAGS",
    "add_class",
    "coerce_attribute",
    "ensure_head",
    "gather_classes",
    "has_class",
    "in_verbatim",
    "is_valid_url",
    "remove_classes",
    "require_article",
    "require_element",
    "text_of",
]
