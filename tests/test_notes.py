from __future__ import annotations

import pytest

from engrafo.components.appendix import APPENDIX_TAG
from engrafo.components.appendix import appendix as appendix_component
from engrafo.components.notes import HOVER_BOX_CLASS, REFERENCE_CLASS, footnote, hover_box
from engrafo.core.exceptions import StageError
from engrafo.postprocessors.headings import appendix, headings
from engrafo.postprocessors.layout import layout
from engrafo.postprocessors.notes import BIBLIOGRAPHY_TAG, CITE_TAG, bibliography, footnotes


BODY = """
<div class="ltx_para"><p class="ltx_p">Text<span id="footnote1" class="ltx_note ltx_role_footnote"><sup class="ltx_note_mark">1</sup><span class="ltx_note_outer"><span class="ltx_note_content"><sup class="ltx_note_mark">1</sup><span class="ltx_tag ltx_tag_note">1</span>A note citing <cite class="ltx_cite ltx_citemacro_cite">[<a href="#bib.bib1" class="ltx_ref">1</a>]</cite>.</span></span></span> more <cite class="ltx_cite ltx_citemacro_cite">[<a href="#bib.bib1" class="ltx_ref">1</a>, <a href="#bib.bib2" class="ltx_ref">2</a>]</cite>.</p></div>
<section id="bib" class="ltx_bibliography">
<h2 class="ltx_title ltx_title_bibliography">References</h2>
<ul class="ltx_biblist">
<li id="bib.bib1" class="ltx_bibitem"><span class="ltx_tag ltx_role_refnum ltx_tag_bibitem">[1]</span><span class="ltx_bibblock">A. Author. First paper.</span></li>
<li id="bib.bib2" class="ltx_bibitem"><span class="ltx_tag ltx_role_refnum ltx_tag_bibitem">[2]</span><span class="ltx_bibblock">B. Author.</span><span class="ltx_bibblock">Second paper.</span></li>
</ul>
</section>
"""


def _run(soup, context, *stages) -> None:
    for function in stages:
        function(soup, context)


def test_footnotes_become_dt_fn(load) -> None:
    soup, context = load(BODY)

    footnotes(soup, context)

    assert soup.select(".ltx_note") == []
    note = soup.find("dt-fn")
    assert note["id"] == "footnote1"
    assert note.find(class_="ltx_note_mark") is None
    assert note.get_text().startswith("A note citing")


def test_footnote_component_numbers_references(load) -> None:
    soup, context = load(BODY)

    _run(soup, context, footnotes, footnote)

    assert soup.find("dt-fn") is None
    marker = soup.find("sup", class_=REFERENCE_CLASS)
    assert marker.a["href"] == "#fn-1"
    assert marker.a["id"] == "fnref-1"
    assert marker.a.get_text() == "1"
    [note] = context.state.footnotes
    assert note.number == 1
    assert note.anchor == "fn-1"
    assert note.content.get_text().startswith("A note citing")


def test_bibliography_collects_citations(load) -> None:
    soup, context = load(BODY)

    _run(soup, context, footnotes, footnote, bibliography)

    citations = context.state.citations
    assert list(citations) == ["bib.bib1", "bib.bib2"]
    assert citations["bib.bib1"].label == "1"
    assert citations["bib.bib2"].content.get_text() == "B. Author. Second paper."
    assert soup.find(BIBLIOGRAPHY_TAG)["id"] == "bib"
    assert soup.select("section.ltx_bibliography") == []


def test_cites_are_converted_in_text_and_footnotes(load) -> None:
    soup, context = load(BODY)

    _run(soup, context, footnotes, footnote, bibliography)

    assert soup.select("cite.ltx_cite") == []
    assert soup.find(CITE_TAG)["key"] == "bib.bib1,bib.bib2"
    [note] = context.state.footnotes
    assert note.content.find(CITE_TAG)["key"] == "bib.bib1"
    assert context.state.cited_keys == ["bib.bib1", "bib.bib2"]


def test_bibliography_entry_without_identifier_fails(load) -> None:
    body = (
        '<section class="ltx_bibliography"><ul class="ltx_biblist">'
        '<li class="ltx_bibitem"><span class="ltx_bibblock">Anonymous.</span></li>'
        "</ul></section>"
    )
    soup, context = load(body)

    with pytest.raises(StageError) as excinfo:
        bibliography(soup, context)

    assert excinfo.value.stage == "bibliography"


def test_appendix_component_collects_end_matter(load) -> None:
    body = BODY + (
        '<section id="A1" class="ltx_appendix">'
        '<h2 class="ltx_title ltx_title_appendix">Proofs</h2></section>'
    )
    soup, context = load(body)

    _run(
        soup,
        context,
        layout,
        headings,
        appendix,
        footnotes,
        footnote,
        bibliography,
        appendix_component,
    )

    element = soup.find(APPENDIX_TAG)
    assert element.find_previous_sibling("dt-article") is not None
    children = [child.name for child in element.find_all(True, recursive=False)]
    assert children == ["div", "h3", "ol", BIBLIOGRAPHY_TAG]
    item = element.find("li", id="fn-1")
    assert item.find("a", class_="footnote-backref")["href"] == "#fnref-1"


def test_appendix_component_requires_article(load) -> None:
    soup, context = load(BODY)

    with pytest.raises(StageError, match="dt-article"):
        appendix_component(soup, context)


def test_appendix_component_without_end_matter(load) -> None:
    soup, context = load()
    layout(soup, context)

    appendix_component(soup, context)

    assert soup.find(APPENDIX_TAG) is None


def test_hover_boxes_for_footnotes_and_citations(load) -> None:
    soup, context = load(BODY)

    _run(soup, context, layout, footnotes, footnote, bibliography, appendix_component, hover_box)

    assert context.state.hover_boxes == [
        "dt-hover-box-fn-1",
        "dt-hover-box-cite-1",
        "dt-hover-box-cite-2",
    ]
    boxes = soup.body.find_all("div", class_=HOVER_BOX_CLASS, recursive=False)
    assert [box["id"] for box in boxes] == context.state.hover_boxes
    marker = soup.find("sup", class_=REFERENCE_CLASS).a
    assert marker["data-hover-box"] == "dt-hover-box-fn-1"
    assert "Second paper." in boxes[1].get_text()
    # The footnote text stays in the appendix; the box holds a copy.
    assert soup.find("li", id="fn-1").find(class_="engrafo-footnote") is not None
