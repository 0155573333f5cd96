"""Postprocessing context primitives shared across the HTML pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .config import EngrafoConfig
from .diagnostics import DiagnosticEmitter, NullEmitter


if TYPE_CHECKING:  # pragma: no cover - typing only
    from bs4 import BeautifulSoup
    from bs4.element import Tag


@dataclass(slots=True)
class Author:
    """Author extracted from the LaTeXML byline."""

    name: str
    affiliations: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Heading:
    """Section heading recorded for the table of contents."""

    level: int
    title: str
    anchor: str | None = None
    number: str | None = None
    appendix: bool = False


@dataclass(slots=True)
class Footnote:
    """Numbered footnote whose body has been lifted out of the text."""

    number: int
    anchor: str
    content: Tag


@dataclass(slots=True)
class Citation:
    """Bibliography entry keyed by its LaTeXML identifier."""

    key: str
    label: str
    content: Tag


@dataclass(slots=True)
class DocumentState:
    """In-memory state accumulated while postprocessing a document.

    Every field is owned by the stage that writes it; later stages only read.
    """

    language: str | None = None
    components: list[str] = field(default_factory=list)
    stylesheets: list[str] = field(default_factory=list)
    title: str | None = None
    authors: list[Author] = field(default_factory=list)
    abstract: str | None = None
    code_blocks: list[str | None] = field(default_factory=list)
    figures: list[str] = field(default_factory=list)
    math_fragments: int = 0
    headings: list[Heading] = field(default_factory=list)
    appendix: list[str] = field(default_factory=list)
    footnotes: list[Footnote] = field(default_factory=list)
    citations: dict[str, Citation] = field(default_factory=dict)
    cited_keys: list[str] = field(default_factory=list)
    hover_boxes: list[str] = field(default_factory=list)
    tables: list[str] = field(default_factory=list)

    def record_citation(self, key: str) -> None:
        """Track citation keys in order of first use."""
        if key not in self.cited_keys:
            self.cited_keys.append(key)

    def heading_for(self, anchor: str) -> Heading | None:
        """Return the heading whose anchor matches, if any."""
        for heading in self.headings:
            if heading.anchor == anchor:
                return heading
        return None


@dataclass
class PostprocessContext:
    """Shared context passed to every stage during one pipeline run."""

    document: BeautifulSoup
    config: EngrafoConfig = field(default_factory=EngrafoConfig)
    state: DocumentState = field(default_factory=DocumentState)
    emitter: DiagnosticEmitter = field(default_factory=NullEmitter)


__all__ = [
    "Author",
    "Citation",
    "DocumentState",
    "Footnote",
    "Heading",
    "PostprocessContext",
]
