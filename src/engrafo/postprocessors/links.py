"""Internal and external link normalisation."""

from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.element import Tag

from engrafo.core.context import PostprocessContext
from engrafo.core.diagnostics import record_event
from engrafo.core.stages import stage

from ._helpers import coerce_attribute, is_valid_url


EXTERNAL_SCHEMES: frozenset[str] = frozenset({"http", "https", "ftp"})


def normalise_href(href: str) -> str:
    """Reduce references into the rendered page itself to a bare fragment."""
    if "#" not in href or is_valid_url(href):
        return href
    path, fragment = href.split("#", 1)
    if path in {"", "index.html", "./index.html"}:
        return f"#{fragment}"
    return href


def _heading_title(context: PostprocessContext, anchor: str) -> str | None:
    heading = context.state.heading_for(anchor)
    if heading is None:
        return None
    return f"{heading.number} {heading.title}" if heading.number else heading.title


@stage("links", requires=("headings",), provides=("links",))
def links(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Normalise internal references and open external links in a new tab.

    Internal references to sections are titled from ``state.headings``.
    References whose target does not exist are kept and reported through a
    ``dangling_reference`` event.
    """
    anchors = {
        value
        for node in soup.find_all(id=True)
        if (value := coerce_attribute(node.get("id")))
    }

    for link in soup.find_all("a", href=True):
        if not isinstance(link, Tag):
            continue
        href = normalise_href(coerce_attribute(link.get("href")) or "")
        link["href"] = href

        if href.startswith("#"):
            target = href[1:]
            if not target:
                continue
            if target not in anchors:
                record_event(
                    context.emitter,
                    "dangling_reference",
                    {"href": href, "text": link.get_text(strip=True)},
                )
                continue
            title = _heading_title(context, target)
            if title and not link.get("title"):
                link["title"] = title
            continue

        scheme = href.split(":", 1)[0].lower() if ":" in href else ""
        if scheme in EXTERNAL_SCHEMES:
            link["target"] = "_blank"
            link["rel"] = "noopener"


__all__ = ["EXTERNAL_SCHEMES", "links", "normalise_href"]
