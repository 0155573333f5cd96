"""Trailing ``<dt-appendix>`` holding appendix sections, footnotes and references."""

from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.element import Tag

from engrafo.core.context import PostprocessContext
from engrafo.core.exceptions import StageError
from engrafo.core.stages import stage
from engrafo.postprocessors.headings import APPENDIX_CLASS
from engrafo.postprocessors.notes import BIBLIOGRAPHY_TAG

from .notes import reference_anchor


APPENDIX_TAG = "dt-appendix"


def _footnote_list(soup: BeautifulSoup, context: PostprocessContext) -> list[Tag]:
    heading = soup.new_tag("h3")
    heading.string = "Footnotes"
    listing = soup.new_tag("ol", attrs={"class": "engrafo-footnotes"})
    for note in context.state.footnotes:
        item = soup.new_tag("li", attrs={"id": note.anchor})
        item.append(note.content)
        backref = soup.new_tag(
            "a", attrs={"class": "footnote-backref", "href": f"#{reference_anchor(note.number)}"}
        )
        backref.string = "↩"
        item.append(" ")
        item.append(backref)
        listing.append(item)
    return [heading, listing]


@stage(
    "components.appendix",
    requires=("appendix", "bibliography"),
    provides=("appendix-components",),
)
def appendix(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Collect end matter into a single ``<dt-appendix>`` after the article.

    Reads ``state.appendix`` and ``state.footnotes``. Nothing is added when
    the document has no appendix, footnotes or references.
    """
    article = soup.find("dt-article")
    if not isinstance(article, Tag):
        raise StageError("components.appendix", "Document has no <dt-article> element")

    sections = soup.find("div", class_=APPENDIX_CLASS) if context.state.appendix else None
    references = soup.find(BIBLIOGRAPHY_TAG)
    if sections is None and not context.state.footnotes and references is None:
        return

    element = soup.new_tag(APPENDIX_TAG)
    if isinstance(sections, Tag):
        element.append(sections.extract())
    if context.state.footnotes:
        for node in _footnote_list(soup, context):
            element.append(node)
    if isinstance(references, Tag):
        element.append(references.extract())
    article.insert_after(element)


__all__ = ["APPENDIX_TAG", "appendix"]
