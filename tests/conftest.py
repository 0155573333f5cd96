from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
import sys
import textwrap
from typing import Any

from bs4 import BeautifulSoup
import pytest

from engrafo.core.config import EngrafoConfig
from engrafo.core.context import PostprocessContext
from engrafo.core.document import load_document


LATEXML_PAGE = """<!DOCTYPE html>
<html lang="{lang}">
<head>
<title>LaTeXML output</title>
<meta content="text/html; charset=utf-8" http-equiv="content-type"/>
<link rel="stylesheet" href="LaTeXML.css" type="text/css"/>
<link rel="stylesheet" href="ltx-article.css" type="text/css"/>
</head>
<body>
<div class="ltx_page_main">
<header class="ltx_page_header">Header</header>
<div class="ltx_page_content">
<article class="ltx_document ltx_authors_1line">
{body}
</article>
</div>
<footer class="ltx_page_footer"><div class="ltx_page_logo">Generated by LaTeXML</div></footer>
</div>
</body>
</html>
"""

MINIMAL_BODY = (
    '<h1 class="ltx_title ltx_title_document">Minimal</h1>\n'
    '<div class="ltx_para"><p class="ltx_p">Hello world.</p></div>'
)


class RecordingEmitter:
    """Emitter collecting every diagnostic for assertions."""

    debug_enabled = False

    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))

    def named(self, name: str) -> list[dict[str, Any]]:
        return [payload for event, payload in self.events if event == name]


def latexml_page(body: str = MINIMAL_BODY, *, lang: str = "en") -> str:
    return LATEXML_PAGE.format(body=body, lang=lang)


@pytest.fixture
def make_page() -> Callable[..., str]:
    return latexml_page


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture
def load(
    emitter: RecordingEmitter,
) -> Callable[..., tuple[BeautifulSoup, PostprocessContext]]:
    """Parse a LaTeXML page body and return the tree with a fresh context."""

    def _load(
        body: str = MINIMAL_BODY, *, config: EngrafoConfig | None = None
    ) -> tuple[BeautifulSoup, PostprocessContext]:
        soup = load_document(latexml_page(body))
        context = PostprocessContext(
            document=soup, config=config or EngrafoConfig(), emitter=emitter
        )
        return soup, context

    return _load


@pytest.fixture
def write_executable(tmp_path: Path) -> Callable[[str, str], Path]:
    """Create a Python script usable as a stand-in for an external command."""

    def _write(name: str, source: str) -> Path:
        path = tmp_path / "bin" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            f"#!{sys.executable}\n" + textwrap.dedent(source).lstrip("\n"), encoding="utf-8"
        )
        path.chmod(0o755)
        return path

    return _write


FAKE_LATEXMLC = """
import pathlib
import sys

args = sys.argv[1:]
dest = pathlib.Path(args[args.index("--dest") + 1])
source = pathlib.Path(args[-1])
print("Processing", source.name)
print("Warning: fake latexmlc", file=sys.stderr)
dest.parent.mkdir(parents=True, exist_ok=True)
dest.write_text(
    '<!DOCTYPE html><html lang="en"><head><title>x</title>'
    '<link rel="stylesheet" href="LaTeXML.css" type="text/css"/></head><body>'
    '<div class="ltx_page_main"><div class="ltx_page_content">'
    '<article class="ltx_document">'
    '<h1 class="ltx_title ltx_title_document">Fake paper</h1>'
    '<div class="ltx_para"><p class="ltx_p">Body of ' + source.stem + '.</p></div>'
    '</article></div></div></body></html>',
    encoding="utf-8",
)
for name in ("LaTeXML.cache", "LaTeXML.css", "ltx-article.css", "ltx-listings.css"):
    (dest.parent / name).write_text("artifact", encoding="utf-8")
"""

FAILING_LATEXMLC = """
import sys

print("Fatal:undefined:\\\\foo", file=sys.stderr)
sys.exit(2)
"""


@pytest.fixture
def fake_latexmlc(write_executable: Callable[[str, str], Path]) -> Path:
    return write_executable("latexmlc", FAKE_LATEXMLC)


@pytest.fixture
def failing_latexmlc(write_executable: Callable[[str, str], Path]) -> Path:
    return write_executable("latexmlc-fail", FAILING_LATEXMLC)


@pytest.fixture
def paper_dir(tmp_path: Path) -> Path:
    source = tmp_path / "paper"
    source.mkdir()
    (source / "main.tex").write_text(
        "\\documentclass{article}\n\\begin{document}\nHello\n\\end{document}\n",
        encoding="utf-8",
    )
    return source
