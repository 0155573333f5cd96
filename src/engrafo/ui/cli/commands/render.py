"""Render a LaTeX paper into an HTML article."""

from __future__ import annotations

from typing import Annotated

import typer

from engrafo.api import RenderJob, RenderService
from engrafo.core.exceptions import EngrafoError
from engrafo.core.inputs import is_remote

from .._options import MathRendererOption, StaticUrlOption
from ..diagnostics import CliEmitter
from ..state import get_cli_state
from ..utils import fail, load_config


def render(
    ctx: typer.Context,
    input_path: Annotated[
        str,
        typer.Argument(
            metavar="INPUT",
            help="Directory, .tex file, archive or s3:// URI holding the LaTeX sources.",
        ),
    ],
    output: Annotated[
        str,
        typer.Argument(
            metavar="OUTPUT",
            help="Output directory or s3:// URI receiving index.html.",
        ),
    ],
    no_postprocessing: Annotated[
        bool,
        typer.Option(
            "--no-postprocessing",
            help="Keep the raw LaTeXML output.",
        ),
    ] = False,
    math_renderer: MathRendererOption = None,
    static_url: StaticUrlOption = None,
) -> None:
    """Convert LaTeX sources into a readable HTML article."""
    state = get_cli_state(ctx)
    config = load_config(state, math_renderer=math_renderer, static_url=static_url)
    service = RenderService(config, emitter=CliEmitter(state))
    job = RenderJob(input=input_path, output=output, postprocessing=not no_postprocessing)

    try:
        html_path = service.render(job)
    except EngrafoError as exc:
        raise fail(exc) from exc
    target = job.output if is_remote(job.output) else html_path
    state.console.print(f"[green]Rendered[/] {target}")
