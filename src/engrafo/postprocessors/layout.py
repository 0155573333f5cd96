"""Page layout stages: the first and the last step of the pipeline."""

from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.element import Tag

from engrafo.core.context import PostprocessContext
from engrafo.core.stages import stage

from ._helpers import coerce_attribute, require_article, require_element


ARTICLE_TAG = "dt-article"
CONTAINER_CLASS = "engrafo-container"

# LaTeXML page furniture that has no place in the article.
PAGE_CHROME: tuple[str, ...] = (
    ".ltx_page_header",
    ".ltx_page_footer",
    ".ltx_page_logo",
    ".ltx_page_navbar",
)

UNWRAPPED_WRAPPERS: tuple[str, ...] = (".ltx_page_main", ".ltx_page_content")

LATEXML_STYLESHEETS: frozenset[str] = frozenset(
    {"LaTeXML.css", "ltx-article.css", "ltx-listings.css", "ltx-report.css", "ltx-book.css"}
)


@stage("layout", provides=("layout",))
def layout(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Reduce LaTeXML page markup to ``<body><dt-article>``.

    Writes ``state.language``.
    """
    article = require_article(soup, "layout")
    require_element(soup, "body", "layout")

    for selector in PAGE_CHROME:
        for node in soup.select(selector):
            node.decompose()

    for selector in UNWRAPPED_WRAPPERS:
        for node in soup.select(selector):
            node.unwrap()

    for link in soup.find_all("link", rel="stylesheet"):
        href = coerce_attribute(link.get("href")) or ""
        if href.rsplit("/", 1)[-1] in LATEXML_STYLESHEETS:
            link.decompose()

    article.name = ARTICLE_TAG

    html = soup.find("html")
    if isinstance(html, Tag):
        context.state.language = coerce_attribute(html.get("lang"))


@stage(
    "container",
    requires=("layout", "components", "styles", "metadata", "links"),
    provides=("container",),
    final=True,
)
def container(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Wrap the finished body in the delivery container.

    Reads nothing. Running it twice nests a second container inside the
    first, so it only applies to raw LaTeXML output.
    """
    body = require_element(soup, "body", "container")
    wrapper = soup.new_tag("div", attrs={"class": CONTAINER_CLASS})
    for child in list(body.contents):
        wrapper.append(child.extract())
    body.append(wrapper)


__all__ = ["ARTICLE_TAG", "CONTAINER_CLASS", "container", "layout"]
