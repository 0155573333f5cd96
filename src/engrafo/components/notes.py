"""Footnote numbering and hover boxes for footnote and citation references."""

from __future__ import annotations

import copy

from bs4 import BeautifulSoup
from bs4.element import Tag

from engrafo.core.context import Footnote, PostprocessContext
from engrafo.core.stages import stage
from engrafo.postprocessors._helpers import coerce_attribute


REFERENCE_CLASS = "footnote-ref"
HOVER_BOX_CLASS = "dt-hover-box"
HOVER_ATTRIBUTE = "data-hover-box"


def footnote_anchor(number: int) -> str:
    return f"fn-{number}"


def reference_anchor(number: int) -> str:
    return f"fnref-{number}"


@stage("components.footnote", requires=("footnotes",), provides=("footnote-components",))
def footnote(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Number ``<dt-fn>`` elements and leave superscript references behind.

    The footnote body is lifted out of the text and kept in
    ``state.footnotes`` for the appendix. Writes ``state.footnotes``.
    """
    for number, element in enumerate(soup.find_all("dt-fn"), start=1):
        anchor = footnote_anchor(number)
        content = soup.new_tag("span", attrs={"class": "engrafo-footnote"})
        for child in list(element.contents):
            content.append(child.extract())

        marker = soup.new_tag("sup", attrs={"class": REFERENCE_CLASS})
        link = soup.new_tag("a", attrs={"href": f"#{anchor}", "id": reference_anchor(number)})
        link.string = str(number)
        marker.append(link)
        element.replace_with(marker)

        context.state.footnotes.append(Footnote(number=number, anchor=anchor, content=content))


def _hover_box(soup: BeautifulSoup, box_id: str, contents: list[Tag]) -> Tag:
    box = soup.new_tag("div", attrs={"class": HOVER_BOX_CLASS, "id": box_id})
    for item in contents:
        box.append(copy.copy(item))
    return box


@stage(
    "components.hover_box",
    requires=("footnote-components", "bibliography"),
    provides=("hover-boxes",),
)
def hover_box(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Attach hidden hover boxes to footnote and citation references.

    Reads ``state.footnotes`` and ``state.citations``; writes
    ``state.hover_boxes``.
    """
    state = context.state
    boxes: list[Tag] = []

    footnotes = {item.anchor: item for item in state.footnotes}
    for marker in soup.select(f"sup.{REFERENCE_CLASS} > a"):
        href = coerce_attribute(marker.get("href")) or ""
        note = footnotes.get(href.lstrip("#"))
        if note is None:
            continue
        box_id = f"dt-hover-box-{note.anchor}"
        marker[HOVER_ATTRIBUTE] = box_id
        boxes.append(_hover_box(soup, box_id, [note.content]))

    for index, cite in enumerate(soup.find_all("dt-cite"), start=1):
        keys = [key for key in (coerce_attribute(cite.get("key")) or "").split(",") if key]
        entries = [state.citations[key].content for key in keys if key in state.citations]
        if not entries:
            continue
        box_id = f"dt-hover-box-cite-{index}"
        cite[HOVER_ATTRIBUTE] = box_id
        boxes.append(_hover_box(soup, box_id, entries))

    if not boxes:
        return
    body = soup.find("body")
    target = body if isinstance(body, Tag) else soup
    for box in boxes:
        target.append(box)
        state.hover_boxes.append(coerce_attribute(box.get("id")) or "")


__all__ = [
    "HOVER_BOX_CLASS",
    "REFERENCE_CLASS",
    "footnote",
    "footnote_anchor",
    "hover_box",
    "reference_anchor",
]
