"""List cleanup."""

from __future__ import annotations

from bs4 import BeautifulSoup

from engrafo.core.context import PostprocessContext
from engrafo.core.stages import stage


LIST_SELECTOR = "ul.ltx_itemize, ol.ltx_enumerate"


@stage("lists", provides=("lists",))
def lists(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Drop LaTeXML bullet tags and inline list styles so CSS numbers items."""
    for listing in soup.select(LIST_SELECTOR):
        for item in listing.find_all("li", recursive=False):
            for tag in item.find_all(class_="ltx_tag_item", recursive=False):
                tag.decompose()
            if "style" in item.attrs:
                del item["style"]
