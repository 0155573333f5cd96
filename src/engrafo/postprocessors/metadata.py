"""Document metadata: title, byline and abstract."""

from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.element import NavigableString, Tag

from engrafo.core.context import Author, PostprocessContext
from engrafo.core.stages import stage

from ._helpers import ensure_head, has_class, text_of


BYLINE_CLASS = "engrafo-byline"


def _split_personname(node: Tag) -> list[str]:
    """Split a LaTeXML person name on its line breaks."""
    lines: list[str] = []
    current: list[str] = []
    for child in node.children:
        if isinstance(child, Tag) and child.name == "br":
            lines.append(" ".join("".join(current).split()))
            current = []
        elif isinstance(child, NavigableString):
            current.append(str(child))
        elif isinstance(child, Tag):
            current.append(child.get_text(" "))
    lines.append(" ".join("".join(current).split()))
    return [line for line in lines if line]


def extract_author(creator: Tag) -> Author | None:
    """Build an :class:`Author` from a ``.ltx_creator`` node."""
    personname = creator.find(class_="ltx_personname")
    if not isinstance(personname, Tag):
        return None
    lines = _split_personname(personname)
    if not lines:
        return None
    affiliations = lines[1:]
    for contact in creator.select(".ltx_contact.ltx_role_affiliation"):
        text = text_of(contact)
        if text and text not in affiliations:
            affiliations.append(text)
    return Author(name=lines[0], affiliations=affiliations)


def _build_byline(soup: BeautifulSoup, authors: list[Author]) -> Tag:
    byline = soup.new_tag("div", attrs={"class": BYLINE_CLASS})
    for author in authors:
        entry = soup.new_tag("span", attrs={"class": "engrafo-author"})
        entry.string = author.name
        for affiliation in author.affiliations:
            span = soup.new_tag("span", attrs={"class": "engrafo-affiliation"})
            span.string = affiliation
            entry.append(span)
        byline.append(entry)
    return byline


def _set_meta(soup: BeautifulSoup, head: Tag, name: str, content: str) -> None:
    head.append(soup.new_tag("meta", attrs={"name": name, "content": content}))


@stage("metadata", requires=("components",), provides=("metadata",))
def metadata(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Collect title, authors and abstract and expose them in the head.

    Writes ``state.title``, ``state.authors`` and ``state.abstract``.
    """
    state = context.state
    head = ensure_head(soup)

    title_node = soup.select_one(".ltx_title_document")
    if isinstance(title_node, Tag):
        state.title = text_of(title_node) or None

    creators = soup.select(".ltx_creator.ltx_role_author")
    for creator in creators:
        author = extract_author(creator)
        if author is not None:
            state.authors.append(author)

    abstract = soup.select_one(".ltx_abstract")
    if isinstance(abstract, Tag):
        paragraphs = [
            text_of(node)
            for node in abstract.find_all("p")
            if not has_class(node, "ltx_title_abstract")
        ]
        state.abstract = "\n\n".join(text for text in paragraphs if text) or None

    if state.title:
        title_tag = head.find("title")
        if not isinstance(title_tag, Tag):
            title_tag = soup.new_tag("title")
            head.append(title_tag)
        title_tag.string = state.title
        _set_meta(soup, head, "citation_title", state.title)

    for author in state.authors:
        _set_meta(soup, head, "citation_author", author.name)

    if creators:
        authors_block = creators[0].find_parent(class_="ltx_authors")
        byline = _build_byline(soup, state.authors)
        if isinstance(authors_block, Tag):
            authors_block.replace_with(byline)
        else:
            creators[0].replace_with(byline)
            for creator in creators[1:]:
                creator.decompose()


__all__ = ["BYLINE_CLASS", "extract_author", "metadata"]
