"""Section headings, table of contents and appendix."""

from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.element import Tag
from slugify import slugify

from engrafo.core.context import Heading, PostprocessContext
from engrafo.core.exceptions import StageError
from engrafo.core.stages import stage

from ._helpers import coerce_attribute, has_class, text_of


HEADING_LEVELS: dict[str, int] = {"h2": 2, "h3": 3, "h4": 4, "h5": 5}
SKIPPED_TITLES: frozenset[str] = frozenset(
    {"ltx_title_document", "ltx_title_abstract", "ltx_title_bibliography"}
)
NUMBER_CLASS = "engrafo-heading-number"
ANCHOR_CLASS = "engrafo-heading-anchor"
TOC_CLASS = "engrafo-toc"
APPENDIX_CLASS = "engrafo-appendix"
TOC_DEPTH = 3


def _is_section_title(node: Tag) -> bool:
    if not has_class(node, "ltx_title"):
        return False
    return not any(has_class(node, name) for name in SKIPPED_TITLES)


def _resolve_anchor(node: Tag, title: str, taken: set[str]) -> str:
    anchor = coerce_attribute(node.get("id"))
    if not anchor and isinstance(node.parent, Tag):
        anchor = coerce_attribute(node.parent.get("id"))
    if not anchor:
        base = slugify(title, separator="-") or "section"
        anchor = base
        suffix = 1
        while anchor in taken:
            suffix += 1
            anchor = f"{base}-{suffix}"
        node["id"] = anchor
    taken.add(anchor)
    return anchor


def _build_toc(soup: BeautifulSoup, headings: list[Heading]) -> Tag:
    nav = soup.new_tag("nav", attrs={"class": TOC_CLASS})
    root = soup.new_tag("ul")
    nav.append(root)
    stack: list[tuple[int, Tag]] = [(1, root)]
    for heading in headings:
        if heading.level > TOC_DEPTH:
            continue
        while len(stack) > 1 and stack[-1][0] >= heading.level:
            stack.pop()
        parent_list = stack[-1][1]
        item = soup.new_tag("li")
        link = soup.new_tag("a", href=f"#{heading.anchor}")
        link.string = f"{heading.number} {heading.title}" if heading.number else heading.title
        item.append(link)
        parent_list.append(item)
        sublist = soup.new_tag("ul")
        item.append(sublist)
        stack.append((heading.level, sublist))
    for empty in nav.find_all("ul"):
        if not empty.contents:
            empty.decompose()
    return nav


@stage("headings", requires=("metadata",), provides=("headings",))
def headings(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Number and anchor section headings and insert a table of contents.

    The LaTeXML section tag becomes ``span.engrafo-heading-number``. Headings
    without an identifier get one derived from their title. Writes
    ``state.headings``.
    """
    taken: set[str] = set()
    for node in soup.find_all(list(HEADING_LEVELS)):
        if not _is_section_title(node):
            continue
        number = None
        tag = node.find(class_="ltx_tag")
        if isinstance(tag, Tag):
            number = text_of(tag) or None
            tag.attrs = {"class": NUMBER_CLASS}
            tag.name = "span"
            if number:
                tag.string = number
        title_parts = [
            text_of(child) if isinstance(child, Tag) else " ".join(str(child).split())
            for child in node.children
            if not (isinstance(child, Tag) and has_class(child, NUMBER_CLASS))
        ]
        title = " ".join(part for part in title_parts if part)
        anchor = _resolve_anchor(node, title, taken)

        link = soup.new_tag("a", attrs={"class": ANCHOR_CLASS, "href": f"#{anchor}"})
        link.string = "#"
        node.append(link)

        context.state.headings.append(
            Heading(level=HEADING_LEVELS[node.name], title=title, anchor=anchor, number=number)
        )

    toc_headings = [item for item in context.state.headings if item.level <= TOC_DEPTH]
    if not toc_headings:
        return
    first = soup.find("section", class_="ltx_section")
    if isinstance(first, Tag):
        first.insert_before(_build_toc(soup, toc_headings))


@stage("appendix", requires=("headings",), provides=("appendix",))
def appendix(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Move appendix sections into a trailing ``div.engrafo-appendix``.

    Reads ``state.headings`` and flags the appendix ones; writes
    ``state.appendix`` with the section identifiers.
    """
    sections = soup.select("section.ltx_appendix")
    if not sections:
        return
    article = soup.find("dt-article") or soup.select_one(".ltx_document")
    if not isinstance(article, Tag):
        raise StageError("appendix", "Appendix sections found outside an article root")

    wrapper = soup.new_tag("div", attrs={"class": APPENDIX_CLASS})
    for section in sections:
        section_id = coerce_attribute(section.get("id")) or ""
        anchors = {coerce_attribute(node.get("id")) for node in section.find_all(id=True)}
        anchors.add(section_id)
        for heading in context.state.headings:
            if heading.anchor in anchors:
                heading.appendix = True
        wrapper.append(section.extract())
        context.state.appendix.append(section_id)
    article.append(wrapper)


__all__ = ["APPENDIX_CLASS", "NUMBER_CLASS", "TOC_CLASS", "appendix", "headings"]
