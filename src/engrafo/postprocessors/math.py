"""Replace LaTeXML MathML with TeX placeholders for the math renderer."""

from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.element import Tag

from engrafo.core.context import PostprocessContext
from engrafo.core.exceptions import StageError
from engrafo.core.stages import stage

from ._helpers import coerce_attribute, text_of


TEX_ENCODING = "application/x-tex"
INLINE_TYPE = "math/tex"
DISPLAY_TYPE = "math/tex; mode=display"
EQUATION_CLASS = "engrafo-equation"
EQUATION_NUMBER_CLASS = "engrafo-equation-number"
EQUATION_TEXT_CLASS = "engrafo-equation-text"
EQUATION_TABLES = "table.ltx_equation, table.ltx_equationgroup"


def tex_source(math: Tag) -> str:
    """Return the TeX source carried by a LaTeXML ``<math>`` element."""
    annotation = math.find("annotation", attrs={"encoding": TEX_ENCODING})
    if isinstance(annotation, Tag):
        text = annotation.get_text().strip()
        if text:
            return text
    alttext = coerce_attribute(math.get("alttext"))
    if alttext and alttext.strip():
        return alttext.strip()
    raise StageError("math", f"<math> element without TeX source: {text_of(math)[:40]!r}")


def _placeholder(soup: BeautifulSoup, tex: str, *, display: bool) -> Tag:
    script = soup.new_tag("script", attrs={"type": DISPLAY_TYPE if display else INLINE_TYPE})
    script.string = tex
    return script


def _is_number_cell(cell: Tag) -> bool:
    return cell.find(class_="ltx_tag_equation") is not None and cell.find("math") is None


def _move_contents(source: Tag, target: Tag) -> None:
    for child in list(source.contents):
        target.append(child.extract())


def _equation_block(soup: BeautifulSoup, row: Tag) -> Tag:
    """Build the display block of a row holding math.

    Cells with prose beside the formula are kept as text spans in cell order.
    """
    block = soup.new_tag("div", attrs={"class": EQUATION_CLASS})
    tex = " ".join(tex_source(math) for math in row.find_all("math"))
    number: Tag | None = None
    placed = False
    for cell in row.find_all(["td", "th"], recursive=False):
        if cell.find("math") is not None:
            if not placed:
                block.append(_placeholder(soup, tex, display=True))
                placed = True
        elif _is_number_cell(cell):
            number = soup.new_tag("span", attrs={"class": EQUATION_NUMBER_CLASS})
            number.string = text_of(cell)
        elif text_of(cell):
            span = soup.new_tag("span", attrs={"class": EQUATION_TEXT_CLASS})
            _move_contents(cell, span)
            block.append(span)
    if not placed:
        block.append(_placeholder(soup, tex, display=True))
    if number is not None:
        block.append(number)
    return block


def _text_block(soup: BeautifulSoup, row: Tag) -> Tag | None:
    """Keep a row without math, such as ``\\intertext``, as a text block."""
    if not text_of(row) and row.find("img") is None:
        return None
    block = soup.new_tag("div", attrs={"class": EQUATION_TEXT_CLASS})
    cells = row.find_all(["td", "th"], recursive=False)
    for cell in cells or [row]:
        if block.contents:
            block.append(" ")
        _move_contents(cell, block)
    return block


def _replace_equation_table(soup: BeautifulSoup, table: Tag) -> int:
    """Turn one equation table into blocks, one per non-empty row.

    Returns the number of display formulas produced.
    """
    blocks: list[Tag] = []
    count = 0
    for row in table.find_all("tr"):
        if row.find("math") is not None:
            block = _equation_block(soup, row)
            count += 1
        else:
            block = _text_block(soup, row)
            if block is None:
                continue
        row_id = coerce_attribute(row.get("id"))
        if row_id:
            block["id"] = row_id
        blocks.append(block)

    table_id = coerce_attribute(table.get("id"))
    if blocks and table_id and "id" not in blocks[0].attrs:
        blocks[0]["id"] = table_id

    for block in blocks:
        table.insert_before(block)
    table.decompose()
    return count


@stage("math", provides=("math-marked",))
def math(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Swap every ``<math>`` for a ``<script type="math/tex">`` placeholder.

    Equation tables become ``div.engrafo-equation`` with the equation number
    kept beside the display placeholder. Rows without math, such as
    ``\\intertext``, become ``div.engrafo-equation-text`` in place. A
    ``<math>`` without TeX source fails the stage.

    Writes ``state.math_fragments``.
    """
    count = 0
    for table in soup.select(EQUATION_TABLES):
        if table.decomposed:
            continue
        count += _replace_equation_table(soup, table)

    for node in soup.find_all("math"):
        display = coerce_attribute(node.get("display")) == "block"
        node.replace_with(_placeholder(soup, tex_source(node), display=display))
        count += 1

    context.state.math_fragments = count


__all__ = [
    "DISPLAY_TYPE",
    "EQUATION_CLASS",
    "EQUATION_NUMBER_CLASS",
    "EQUATION_TEXT_CLASS",
    "INLINE_TYPE",
    "math",
    "tex_source",
]
