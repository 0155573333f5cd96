"""Loading and serialising the rendered HTML document."""

from __future__ import annotations

from bs4 import BeautifulSoup, FeatureNotFound
from bs4.element import Tag

from .diagnostics import DiagnosticEmitter, record_event
from .exceptions import MalformedDocument


ARTICLE_ROOT_SELECTOR = ".ltx_document"


def parse_html(
    html: str,
    *,
    parser: str = "lxml",
    emitter: DiagnosticEmitter | None = None,
) -> BeautifulSoup:
    """Parse HTML with the preferred backend, falling back to ``html.parser``."""
    try:
        return BeautifulSoup(html, parser)
    except FeatureNotFound:
        if parser == "html.parser":
            raise
        record_event(emitter, "parser_fallback", {"preferred": parser, "fallback": "html.parser"})
        return BeautifulSoup(html, "html.parser")


def find_article_root(soup: BeautifulSoup) -> Tag | None:
    """Return the node marking the beginning of the article content."""
    return soup.select_one(ARTICLE_ROOT_SELECTOR)


def load_document(
    html: str,
    *,
    parser: str = "lxml",
    emitter: DiagnosticEmitter | None = None,
) -> BeautifulSoup:
    """Parse LaTeXML output and check there is actually a document to process.

    BeautifulSoup only builds a tree: stylesheets, scripts and images
    referenced by the markup are never fetched.
    """
    soup = parse_html(html, parser=parser, emitter=emitter)

    article = find_article_root(soup)
    if article is None:
        raise MalformedDocument(f"Could not find {ARTICLE_ROOT_SELECTOR}")
    # Title and metadata are always present when LaTeXML produced anything.
    if article.find(True, recursive=False) is None:
        raise MalformedDocument("Document is blank")
    return soup


def serialize_document(soup: BeautifulSoup) -> str:
    """Convert the document tree back into an HTML string."""
    return soup.decode(formatter="minimal")


__all__ = [
    "ARTICLE_ROOT_SELECTOR",
    "find_article_root",
    "load_document",
    "parse_html",
    "serialize_document",
]
