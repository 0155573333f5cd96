"""Figure and table presentation."""

from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.element import Tag

from engrafo.core.context import PostprocessContext
from engrafo.core.stages import stage

from ._helpers import add_class, coerce_attribute, has_class, remove_classes


FIGURE_NUMBER_CLASS = "figure-number"
TABLE_WRAPPER_CLASS = "engrafo-table-wrapper"


def _mark_number(caption: Tag, tag_class: str) -> None:
    """Turn the LaTeXML caption tag into a ``figure-number`` span."""
    number = caption.find(class_=tag_class)
    if isinstance(number, Tag):
        number.name = "span"
        number.attrs = {"class": FIGURE_NUMBER_CLASS}


def _caption_last(figure: Tag) -> Tag | None:
    caption = figure.find("figcaption", recursive=False)
    if not isinstance(caption, Tag):
        return None
    figure.append(caption.extract())
    return caption


@stage("figures", provides=("figures",))
def figures(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Give every ``figure.ltx_figure`` a trailing caption and fluid images.

    Writes ``state.figures`` with the figure identifiers in document order.
    """
    for figure in soup.select("figure.ltx_figure"):
        caption = _caption_last(figure)
        if caption is not None:
            _mark_number(caption, "ltx_tag_figure")
            remove_classes(caption, "ltx_centering")

        for image in figure.find_all("img"):
            for attribute in ("width", "height", "style"):
                if attribute in image.attrs:
                    del image[attribute]
            add_class(image, "engrafo-figure-image")

        context.state.figures.append(coerce_attribute(figure.get("id")) or "")


@stage("tables", requires=("math-marked",), provides=("tables",))
def tables(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Wrap tables in scroll containers and number table captions.

    Equation tables are already gone at this point, so every remaining
    ``table.ltx_tabular`` is a data table. Writes ``state.tables``.
    """
    for figure in soup.select("figure.ltx_table"):
        caption = figure.find("figcaption", recursive=False)
        if isinstance(caption, Tag):
            _mark_number(caption, "ltx_tag_table")
        context.state.tables.append(coerce_attribute(figure.get("id")) or "")

    for table in soup.select("table.ltx_tabular"):
        parent = table.parent
        if isinstance(parent, Tag) and has_class(parent, TABLE_WRAPPER_CLASS):
            continue
        wrapper = soup.new_tag("div", attrs={"class": TABLE_WRAPPER_CLASS})
        table.wrap(wrapper)
        for attribute in ("width", "style"):
            if attribute in table.attrs:
                del table[attribute]


__all__ = ["FIGURE_NUMBER_CLASS", "TABLE_WRAPPER_CLASS", "figures", "tables"]
