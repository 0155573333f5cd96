from __future__ import annotations

from engrafo.postprocessors.metadata import BYLINE_CLASS, metadata


BODY = """
<h1 class="ltx_title ltx_title_document">Deep Nets</h1>
<div class="ltx_authors">
<span class="ltx_creator ltx_role_author"><span class="ltx_personname">Ada Lovelace<br class="ltx_break"/>Analytical Engines Ltd</span></span>
<span class="ltx_author_before">, </span>
<span class="ltx_creator ltx_role_author"><span class="ltx_personname">Alan Turing</span><span class="ltx_contact ltx_role_affiliation">Bletchley Park</span></span>
</div>
<div class="ltx_abstract"><h6 class="ltx_title ltx_title_abstract">Abstract</h6><p class="ltx_p">We study
 things.</p></div>
<div class="ltx_para"><p class="ltx_p">Body.</p></div>
"""


def test_metadata_collects_title_authors_and_abstract(load) -> None:
    soup, context = load(BODY)

    metadata(soup, context)

    state = context.state
    assert state.title == "Deep Nets"
    assert [author.name for author in state.authors] == ["Ada Lovelace", "Alan Turing"]
    assert state.authors[0].affiliations == ["Analytical Engines Ltd"]
    assert state.authors[1].affiliations == ["Bletchley Park"]
    assert state.abstract == "We study things."


def test_metadata_exposes_citation_tags(load) -> None:
    soup, context = load(BODY)

    metadata(soup, context)

    assert soup.head.title.string == "Deep Nets"
    assert soup.head.find("meta", attrs={"name": "citation_title"})["content"] == "Deep Nets"
    tags = soup.head.find_all("meta", attrs={"name": "citation_author"})
    authors = [tag["content"] for tag in tags]
    assert authors == ["Ada Lovelace", "Alan Turing"]


def test_metadata_replaces_author_block_with_byline(load) -> None:
    soup, context = load(BODY)

    metadata(soup, context)

    assert soup.select(".ltx_authors") == []
    byline = soup.find("div", class_=BYLINE_CLASS)
    assert byline is not None
    assert len(byline.select(".engrafo-author")) == 2
    assert [node.get_text() for node in byline.select(".engrafo-affiliation")] == [
        "Analytical Engines Ltd",
        "Bletchley Park",
    ]


def test_metadata_without_front_matter_is_a_no_op(load) -> None:
    soup, context = load('<div class="ltx_para"><p class="ltx_p">Only text.</p></div>')

    metadata(soup, context)

    assert context.state.title is None
    assert context.state.authors == []
    assert context.state.abstract is None
    assert soup.find("meta", attrs={"name": "citation_title"}) is None
    assert soup.find("div", class_=BYLINE_CLASS) is None
