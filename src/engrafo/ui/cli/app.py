"""Typer application wiring for the Engrafo CLI."""

from __future__ import annotations

import typer

from ._options import ConfigOption, DebugOption, VerboseOption
from .commands import postprocess, render
from .state import configure_logging, debug_enabled, emit_error, set_cli_state
from .utils import print_traceback


app = typer.Typer(
    help="Convert LaTeX papers into responsive HTML articles.",
    context_settings={"help_option_names": ["--help"]},
    no_args_is_help=True,
)


@app.callback()
def configure(
    ctx: typer.Context,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
    config: ConfigOption = None,
) -> None:
    """Engrafo command-line interface."""
    state = set_cli_state(ctx=ctx, verbosity=verbose, debug=debug, config_path=config)
    configure_logging(state)


app.command()(render)
app.command()(postprocess)


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - unexpected failures only
        if debug_enabled():
            print_traceback(exc)
        else:
            emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "main"]
