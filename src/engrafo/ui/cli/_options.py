"""Reusable Typer option declarations."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


DIAGNOSTICS_PANEL = "Diagnostics"
RENDERING_PANEL = "Rendering"

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        help="YAML file holding renderer settings.",
    ),
]

MathRendererOption = Annotated[
    str | None,
    typer.Option(
        "--math-renderer",
        help="Math backend: 'mathjax' (SVG through tex2svg) or 'mathml'.",
        rich_help_panel=RENDERING_PANEL,
    ),
]

StaticUrlOption = Annotated[
    str | None,
    typer.Option(
        "--static-url",
        help="Link stylesheets from this URL prefix instead of inlining them.",
        rich_help_panel=RENDERING_PANEL,
    ),
]

__all__ = [
    "ConfigOption",
    "DebugOption",
    "MathRendererOption",
    "StaticUrlOption",
    "VerboseOption",
]
