from __future__ import annotations

from engrafo.core.config import EngrafoConfig
from engrafo.postprocessors.code import CODE_CLASS, code


def _listing(language: str | None) -> str:
    language_class = f" ltx_lst_language_{language}" if language else ""
    return (
        f'<div class="ltx_listing{language_class} ltx_lstlisting">'
        '<div class="ltx_listing_data"><a href="data:text/plain;base64,ZGVm" download="">&#8659;</a></div>'
        '<div class="ltx_listingline" id="lstnumberx1">'
        '<span class="ltx_tag ltx_tag_listingline">1</span>'
        '<span class="ltx_text ltx_lst_keyword">def</span>'
        '<span class="ltx_text ltx_lst_space">&#160;</span>f():</div>'
        '<div class="ltx_listingline" id="lstnumberx2">'
        '<span class="ltx_tag ltx_tag_listingline">2</span>'
        '<span class="ltx_text ltx_lst_space">&#160;&#160;&#160;&#160;</span>return 1</div>'
        "</div>"
    )


SOURCE = "def f():\n    return 1"


def test_listing_is_highlighted(load) -> None:
    soup, context = load(_listing("Python"))

    code(soup, context)

    assert soup.select(".ltx_listing") == []
    pre = soup.find("pre")
    assert pre["class"] == [CODE_CLASS, "highlight"]
    code_tag = pre.find("code")
    assert code_tag["class"] == ["language-python"]
    assert code_tag.find("span") is not None
    assert code_tag.get_text().rstrip("\n") == SOURCE
    assert soup.head.find("style", attrs={"data-engrafo-style": "pygments"}) is not None
    assert context.state.code_blocks == ["python"]


def test_highlighting_can_be_disabled(load) -> None:
    soup, context = load(_listing("Python"), config=EngrafoConfig(highlight_code=False))

    code(soup, context)

    code_tag = soup.find("pre").find("code")
    assert code_tag.string == SOURCE
    assert code_tag.find("span") is None
    assert soup.head.find("style", attrs={"data-engrafo-style": "pygments"}) is None


def test_unknown_language_is_kept_plain(load) -> None:
    soup, context = load(_listing("Nosuchlanguagex"))

    code(soup, context)

    pre = soup.find("pre")
    assert pre["class"] == [CODE_CLASS]
    assert pre.find("code").string == SOURCE
    assert context.state.code_blocks == ["nosuchlanguagex"]


def test_listing_without_language(load) -> None:
    soup, context = load(_listing(None))

    code(soup, context)

    code_tag = soup.find("pre").find("code")
    assert "class" not in code_tag.attrs
    assert code_tag.string == SOURCE
    assert context.state.code_blocks == [None]
