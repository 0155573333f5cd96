"""Stylesheet injection."""

from __future__ import annotations

from bs4 import BeautifulSoup

from engrafo.assets import read_stylesheet
from engrafo.core.context import PostprocessContext
from engrafo.core.stages import stage

from ._helpers import ensure_head


STYLESHEETS: tuple[str, ...] = ("engrafo.css",)
COMPONENT_STYLESHEET = "components.css"
STYLE_MARKER = "data-engrafo-style"


@stage("styles", requires=("components",), provides=("styles",))
def styles(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Link or inline the Engrafo stylesheets.

    With ``config.static_url`` set, the article stylesheet is linked from that
    prefix; otherwise its text is inlined. Component styles are always inlined
    so the custom elements render before any external asset loads.

    Writes ``state.stylesheets``.
    """
    head = ensure_head(soup)
    prefix = context.config.static_url

    for name in STYLESHEETS:
        if prefix:
            href = f"{prefix}/{name}"
            head.append(soup.new_tag("link", attrs={"rel": "stylesheet", "href": href}))
            context.state.stylesheets.append(href)
        else:
            node = soup.new_tag("style", attrs={STYLE_MARKER: name})
            node.string = read_stylesheet(name)
            head.append(node)
            context.state.stylesheets.append(name)

    component = soup.new_tag("style", attrs={STYLE_MARKER: COMPONENT_STYLESHEET})
    component.string = read_stylesheet(COMPONENT_STYLESHEET)
    head.append(component)
    context.state.stylesheets.append(COMPONENT_STYLESHEET)


__all__ = ["COMPONENT_STYLESHEET", "STYLESHEETS", "STYLE_MARKER", "styles"]
