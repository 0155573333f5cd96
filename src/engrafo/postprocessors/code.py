"""Code listings: LaTeXML line tables to highlighted ``<pre><code>``."""

from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.element import Tag
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import ClassNotFound, get_lexer_by_name

from engrafo.core.context import PostprocessContext
from engrafo.core.stages import stage

from ._helpers import ensure_head, gather_classes


LANGUAGE_PREFIX = "ltx_lst_language_"
CODE_CLASS = "engrafo-code"
HIGHLIGHT_CLASS = "highlight"
PYGMENTS_STYLE = "default"


class PygmentsHtmlHighlighter:
    """Convert source code to HTML spans using Pygments."""

    def __init__(self, *, style: str = PYGMENTS_STYLE, cssclass: str = HIGHLIGHT_CLASS) -> None:
        self.style = style
        self.cssclass = cssclass

    def render(self, code: str, language: str) -> str | None:
        """Return highlighted markup, or ``None`` when the language is unknown."""
        try:
            lexer = get_lexer_by_name(language)
        except ClassNotFound:
            return None
        formatter = HtmlFormatter(nowrap=True, style=self.style)
        return highlight(code, lexer, formatter)

    def style_defs(self) -> str:
        """Return the CSS rules for highlighted blocks."""
        formatter = HtmlFormatter(style=self.style, cssclass=self.cssclass)
        return formatter.get_style_defs(f".{self.cssclass}")


def _extract_language(listing: Tag) -> str | None:
    for cls in gather_classes(listing.get("class")):
        if cls.startswith(LANGUAGE_PREFIX):
            return cls[len(LANGUAGE_PREFIX) :].lower() or None
    return None


def _collect_lines(listing: Tag) -> str:
    lines: list[str] = []
    for line in listing.select(".ltx_listingline"):
        for number in line.select(".ltx_tag_listingline"):
            number.decompose()
        lines.append(line.get_text().replace("\u00a0", " ").rstrip())
    if not lines:
        return listing.get_text().replace("\u00a0", " ").strip("\n")
    return "\n".join(lines)


@stage("code", requires=("layout",), provides=("code",))
def code(soup: BeautifulSoup, context: PostprocessContext) -> None:
    """Rewrite ``.ltx_listing`` blocks as ``<pre><code>``.

    Line numbers and the data download link are dropped. Listings whose
    language Pygments knows are highlighted when ``config.highlight_code``
    is set. Writes ``state.code_blocks`` with one language (or ``None``) per
    block.
    """
    highlighter = PygmentsHtmlHighlighter()
    highlighted = False

    for listing in soup.select(".ltx_listing"):
        for data in listing.select(".ltx_listing_data"):
            data.decompose()
        language = _extract_language(listing)
        source = _collect_lines(listing)

        pre = soup.new_tag("pre", attrs={"class": CODE_CLASS})
        code_tag = soup.new_tag("code")
        if language:
            code_tag["class"] = [f"language-{language}"]
        pre.append(code_tag)

        markup = None
        if language and context.config.highlight_code:
            markup = highlighter.render(source, language)
        if markup is not None:
            fragment = BeautifulSoup(markup, "html.parser")
            for child in list(fragment.contents):
                code_tag.append(child.extract())
            pre["class"] = [CODE_CLASS, HIGHLIGHT_CLASS]
            highlighted = True
        else:
            code_tag.string = source

        listing.replace_with(pre)
        context.state.code_blocks.append(language)

    if highlighted:
        style = soup.new_tag("style", attrs={"data-engrafo-style": "pygments"})
        style.string = highlighter.style_defs()
        ensure_head(soup).append(style)


__all__ = ["CODE_CLASS", "PygmentsHtmlHighlighter", "code"]
