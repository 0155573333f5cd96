"""Postprocess an existing LaTeXML HTML file."""

from __future__ import annotations

import asyncio
from pathlib import Path
import shutil
from typing import Annotated

import typer

from engrafo.adapters.math import create_math_renderer
from engrafo.api import process_html
from engrafo.core.exceptions import EngrafoError

from .._options import MathRendererOption, StaticUrlOption
from ..diagnostics import CliEmitter
from ..state import emit_error, get_cli_state
from ..utils import fail, load_config


def postprocess(
    ctx: typer.Context,
    html: Annotated[
        Path,
        typer.Argument(
            exists=True,
            dir_okay=False,
            metavar="HTML",
            help="HTML file produced by latexmlc.",
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            dir_okay=False,
            help="Write the result here instead of rewriting HTML in place.",
        ),
    ] = None,
    math_renderer: MathRendererOption = None,
    static_url: StaticUrlOption = None,
) -> None:
    """Run the article pipeline and math rendering over LaTeXML output."""
    state = get_cli_state(ctx)
    config = load_config(state, math_renderer=math_renderer, static_url=static_url)

    target = html
    if output is not None:
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(html, output)
        except OSError as exc:
            emit_error(str(exc), exception=exc)
            raise typer.Exit(code=1) from exc
        target = output

    try:
        renderer = create_math_renderer(config)
        asyncio.run(process_html(target, config, renderer, emitter=CliEmitter(state)))
    except EngrafoError as exc:
        raise fail(exc) from exc
    state.console.print(f"[green]Postprocessed[/] {target}")
