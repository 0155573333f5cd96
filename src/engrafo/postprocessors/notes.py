"""Footnotes and bibliography, converted to article component elements."""

from __future__ import annotations

import copy

from bs4 import BeautifulSoup
from bs4.element import Tag

from engrafo.core.context import Citation, PostprocessContext
from engrafo.core.exceptions import StageError
from engrafo.core.stages import stage

from ._helpers import coerce_attribute, text_of


FOOTNOTE_TAG = "dt-fn"
BIBLIOGRAPHY_TAG = "dt-bibliography"
CITE_TAG = "dt-cite"


def _footnote_body(soup: BeautifulSoup, note: Tag) -> Tag:
    """Return a ``dt-fn`` holding the note text without its marks."""
    content = note.find(class_="ltx_note_content")
    source = content if isinstance(content, Tag) else note
    for mark in source.select(".ltx_note_mark, .ltx_tag_note"):
        mark.decompose()
    element = soup.new_tag(FOOTNOTE_TAG)
    note_id = coerce_attribute(note.get("id"))
    if note_id:
        element["id"] = note_id
    for child in list(source.contents):
        element.append(child.extract())
    return element


@stage("footnotes", provides=("footnotes",))
def footnotes(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Replace LaTeXML footnotes with ``<dt-fn>`` elements in place."""
    for note in soup.select(".ltx_note.ltx_role_footnote"):
        note.replace_with(_footnote_body(soup, note))


def _citation_label(item: Tag, fallback: str) -> str:
    tag = item.find(class_="ltx_tag_bibitem")
    if not isinstance(tag, Tag):
        return fallback
    label = text_of(tag).strip("[]() ")
    tag.decompose()
    return label or fallback


def _collect_citations(soup: BeautifulSoup, section: Tag, context: PostprocessContext) -> None:
    for position, item in enumerate(section.select("li.ltx_bibitem"), start=1):
        key = coerce_attribute(item.get("id"))
        if not key:
            raise StageError("bibliography", f"Bibliography entry {position} has no identifier")
        label = _citation_label(item, str(position))
        content = soup.new_tag("span", attrs={"class": "engrafo-citation"})
        for block in item.select(".ltx_bibblock"):
            if content.contents:
                content.append(" ")
            content.append(copy.copy(block))
        context.state.citations[key] = Citation(key=key, label=label, content=content)


def _convert_cites(
    soup: BeautifulSoup, scope: Tag | BeautifulSoup, context: PostprocessContext
) -> None:
    for cite in scope.select("cite.ltx_cite"):
        keys: list[str] = []
        for link in cite.find_all("a", href=True):
            href = coerce_attribute(link.get("href")) or ""
            key = href.rsplit("#", 1)[-1]
            if key in context.state.citations and key not in keys:
                keys.append(key)
        if not keys:
            continue
        for key in keys:
            context.state.record_citation(key)
        element = soup.new_tag(CITE_TAG, attrs={"key": ",".join(keys)})
        for child in list(cite.contents):
            element.append(child.extract())
        cite.replace_with(element)


@stage("bibliography", requires=("footnote-components",), provides=("bibliography",))
def bibliography(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Convert the reference list and every citation.

    Citations inside footnotes live in ``state.footnotes`` by now and are
    converted there as well. Writes ``state.citations`` and
    ``state.cited_keys``.
    """
    section = soup.select_one("section.ltx_bibliography")
    if not isinstance(section, Tag):
        return

    _collect_citations(soup, section, context)
    section.name = BIBLIOGRAPHY_TAG

    _convert_cites(soup, soup, context)
    for footnote in context.state.footnotes:
        _convert_cites(soup, footnote.content, context)


__all__ = ["BIBLIOGRAPHY_TAG", "CITE_TAG", "FOOTNOTE_TAG", "bibliography", "footnotes"]
