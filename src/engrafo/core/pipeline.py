"""Default postprocessing pipeline and the HTML processing entry points."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from engrafo.components.appendix import appendix as appendix_component
from engrafo.components.html import html as html_component
from engrafo.components.notes import footnote as footnote_component
from engrafo.components.notes import hover_box as hover_box_component
from engrafo.components.typeset import typeset as typeset_component
from engrafo.postprocessors.code import code
from engrafo.postprocessors.figures import figures, tables
from engrafo.postprocessors.headings import appendix, headings
from engrafo.postprocessors.layout import container, layout
from engrafo.postprocessors.links import links
from engrafo.postprocessors.lists import lists
from engrafo.postprocessors.math import math
from engrafo.postprocessors.metadata import metadata
from engrafo.postprocessors.notes import bibliography, footnotes
from engrafo.postprocessors.styles import styles
from engrafo.postprocessors.typeset import typeset

from .config import EngrafoConfig
from .context import PostprocessContext
from .diagnostics import DiagnosticEmitter, NullEmitter
from .document import load_document, serialize_document
from .exceptions import PostprocessingError
from .math import MathRenderer, render_math
from .stages import StageCallable, StagePipeline


logger = logging.getLogger(__name__)


# Execution order. Each stage reads what the earlier ones left in the tree and
# in the shared state, so reordering is checked by ``StagePipeline``.
DEFAULT_STAGES: tuple[StageCallable, ...] = (
    layout,
    html_component,
    styles,
    metadata,
    code,
    figures,
    math,
    headings,
    appendix,
    footnotes,
    footnote_component,
    bibliography,
    appendix_component,
    typeset_component,
    typeset,
    hover_box_component,
    tables,
    lists,
    links,
    container,
)


def build_pipeline() -> StagePipeline:
    """Return the validated default pipeline."""
    return StagePipeline(DEFAULT_STAGES)


def postprocess(
    html: str,
    config: EngrafoConfig | None = None,
    *,
    emitter: DiagnosticEmitter | None = None,
    pipeline: StagePipeline | None = None,
) -> str:
    """Run the DOM stages over LaTeXML output and return the new HTML.

    Math placeholders are left in place; :func:`process_html` renders them.
    """
    config = config or EngrafoConfig()
    emitter = emitter or NullEmitter()
    pipeline = pipeline or build_pipeline()

    soup = load_document(html, parser=config.parser, emitter=emitter)
    context = PostprocessContext(document=soup, config=config, emitter=emitter)
    pipeline.run(soup, context)
    return serialize_document(soup)


async def process_html(
    html_path: Path,
    config: EngrafoConfig,
    renderer: MathRenderer,
    *,
    emitter: DiagnosticEmitter | None = None,
    pipeline: StagePipeline | None = None,
) -> Path:
    """Postprocess ``html_path`` in place: read, transform, render math, write."""
    try:
        html = await asyncio.to_thread(html_path.read_text, encoding="utf-8")
        logger.debug("Postprocessing %s", html_path)
        processed = postprocess(html, config, emitter=emitter, pipeline=pipeline)
        processed = await render_math(
            processed, renderer, concurrency=config.math_concurrency
        )
        await asyncio.to_thread(html_path.write_text, processed, encoding="utf-8")
    except PostprocessingError:
        raise
    except (OSError, UnicodeDecodeError) as exc:
        raise PostprocessingError(f"Failed to postprocess '{html_path}': {exc}") from exc
    return html_path


__all__ = ["DEFAULT_STAGES", "build_pipeline", "postprocess", "process_html"]
