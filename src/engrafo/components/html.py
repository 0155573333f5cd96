"""Document skeleton expected by Distill-style article components."""

from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.element import Tag

from engrafo.core.context import PostprocessContext
from engrafo.core.exceptions import StageError
from engrafo.core.stages import stage
from engrafo.postprocessors._helpers import ensure_head


VIEWPORT = "width=device-width, initial-scale=1"


@stage("components.html", requires=("layout",), provides=("components",))
def html(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Make sure the head carries the charset, viewport and language.

    Reads ``state.language``; writes ``state.components``.
    """
    if soup.find("dt-article") is None:
        raise StageError("components.html", "Document has no <dt-article> element")

    root = soup.find("html")
    if isinstance(root, Tag) and not root.get("lang"):
        root["lang"] = context.state.language or "en"

    head = ensure_head(soup)
    if head.find("meta", charset=True) is None:
        head.insert(0, soup.new_tag("meta", attrs={"charset": "utf-8"}))
    if head.find("meta", attrs={"name": "viewport"}) is None:
        head.append(soup.new_tag("meta", attrs={"name": "viewport", "content": VIEWPORT}))

    context.state.components.append("html")


__all__ = ["VIEWPORT", "html"]
