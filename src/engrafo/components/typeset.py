"""Typographic substitutions applied to prose text nodes."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup
from bs4.element import NavigableString

from engrafo.core.context import PostprocessContext
from engrafo.core.stages import stage
from engrafo.postprocessors._helpers import in_verbatim


_DASH_PATTERN = re.compile(r"---|--")
_ELLIPSIS_PATTERN = re.compile(r"\.\.\.")
_OPENING_DOUBLE = re.compile(r'(^|[\s(\[{\u2014\u2013])"')
_OPENING_SINGLE = re.compile(r"(^|[\s(\[{\u2014\u2013])'")


def _replace_dashes(text: str) -> str:
    """Replace ASCII dash sequences with typographic counterparts."""

    def _swap(match: re.Match[str]) -> str:
        payload = match.group(0)
        return "\u2014" if payload == "---" else "\u2013"

    return _DASH_PATTERN.sub(_swap, text)


def typeset_text(text: str) -> str:
    """Return ``text`` with curly quotes, dashes and ellipses."""
    text = _replace_dashes(text)
    text = _ELLIPSIS_PATTERN.sub("\u2026", text)
    text = _OPENING_DOUBLE.sub("\\1\u201c", text)
    text = text.replace('"', "\u201d")
    text = _OPENING_SINGLE.sub("\\1\u2018", text)
    return text.replace("'", "\u2019")


@stage("components.typeset", provides=("typeset",))
def typeset(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Typeset every prose text node outside code, math and scripts."""
    for node in list(soup.find_all(string=True)):
        # Subclasses are comments, doctypes and script or style text.
        if type(node) is not NavigableString or in_verbatim(node):
            continue
        updated = typeset_text(str(node))
        if updated != node:
            node.replace_with(updated)


__all__ = ["typeset", "typeset_text"]
