from __future__ import annotations

from engrafo.postprocessors.figures import (
    FIGURE_NUMBER_CLASS,
    TABLE_WRAPPER_CLASS,
    figures,
    tables,
)


FIGURE = """
<figure class="ltx_figure" id="S1.F1">
<figcaption class="ltx_caption ltx_centering"><span class="ltx_tag ltx_tag_figure">Figure 1: </span>A plot.</figcaption>
<img src="x1.png" id="S1.F1.g1" class="ltx_graphics ltx_centering" width="598" height="300" alt=""/>
</figure>
"""

TABLE = """
<figure class="ltx_table" id="S1.T1">
<figcaption class="ltx_caption"><span class="ltx_tag ltx_tag_table">Table 1: </span>Results.</figcaption>
<table class="ltx_tabular ltx_align_middle" style="width:100%"><tbody><tr><td class="ltx_td">1</td></tr></tbody></table>
</figure>
"""


def test_figure_caption_moves_after_image(load) -> None:
    soup, context = load(FIGURE)

    figures(soup, context)

    figure = soup.find("figure")
    assert figure.find_all(True, recursive=False)[-1].name == "figcaption"
    number = figure.find("span", class_=FIGURE_NUMBER_CLASS)
    assert number.get_text() == "Figure 1: "
    assert "ltx_centering" not in figure.figcaption["class"]
    assert context.state.figures == ["S1.F1"]


def test_figure_images_become_fluid(load) -> None:
    soup, context = load(FIGURE)

    figures(soup, context)

    image = soup.find("img")
    assert "width" not in image.attrs
    assert "height" not in image.attrs
    assert "engrafo-figure-image" in image["class"]


def test_tables_are_wrapped_and_numbered(load) -> None:
    soup, context = load(TABLE)

    tables(soup, context)

    table = soup.find("table")
    assert table.parent.name == "div"
    assert table.parent["class"] == [TABLE_WRAPPER_CLASS]
    assert "style" not in table.attrs
    assert soup.find("span", class_=FIGURE_NUMBER_CLASS).get_text() == "Table 1: "
    assert context.state.tables == ["S1.T1"]


def test_tables_are_wrapped_once(load) -> None:
    soup, context = load(TABLE)

    tables(soup, context)
    tables(soup, context)

    assert len(soup.select(f"div.{TABLE_WRAPPER_CLASS}")) == 1
