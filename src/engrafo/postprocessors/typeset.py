"""Undo typographic substitutions where literal characters matter."""

from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.element import NavigableString, Tag

from engrafo.core.context import PostprocessContext
from engrafo.core.stages import stage

from ._helpers import has_class


LITERAL_CHARACTERS: dict[str, str] = {
    "\u201c": '"',
    "\u201d": '"',
    "\u2018": "'",
    "\u2019": "'",
    "\u2014": "---",
    "\u2013": "--",
    "\u2026": "...",
}
MONOSPACE_SELECTOR = ".ltx_font_typewriter, .ltx_url, tt"
NO_BREAK_SPACE = "\u00a0"


def restore_literals(text: str) -> str:
    """Map typographic characters back to their ASCII spelling."""
    for typographic, literal in LITERAL_CHARACTERS.items():
        text = text.replace(typographic, literal)
    return text


def _restore_within(node: Tag) -> None:
    for text in list(node.find_all(string=True)):
        if type(text) is not NavigableString:
            continue
        restored = restore_literals(str(text))
        if restored != text:
            text.replace_with(restored)


@stage("typeset", requires=("typeset",), provides=("typeset-fixed",))
def typeset(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Restore literal characters in monospace text and URLs.

    Also glues citations to the preceding word with a no-break space.
    """
    for node in soup.select(MONOSPACE_SELECTOR):
        _restore_within(node)

    for link in soup.find_all("a", href=True):
        if has_class(link, "ltx_url") or restore_literals(link.get_text()) == link.get("href"):
            _restore_within(link)

    for cite in soup.find_all("dt-cite"):
        previous = cite.previous_sibling
        if type(previous) is NavigableString and str(previous).endswith(" "):
            previous.replace_with(str(previous).rstrip(" ") + NO_BREAK_SPACE)


__all__ = ["LITERAL_CHARACTERS", "restore_literals", "typeset"]
