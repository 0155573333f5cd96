"""Helpers shared by CLI commands."""

from __future__ import annotations

from typing import Any

import typer

from engrafo.core.config import ConfigError, EngrafoConfig
from engrafo.core.exceptions import exception_hint

from .state import CLIState, emit_error, get_cli_state


def load_config(state: CLIState, **overrides: Any) -> EngrafoConfig:
    """Load the configuration file selected on the command line and apply overrides."""
    try:
        config = EngrafoConfig()
        if state.config_path is not None:
            config = EngrafoConfig.from_file(state.config_path)
        return config.with_overrides(**overrides)
    except ConfigError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=2) from exc


def print_traceback(exc: BaseException) -> None:
    """Render a rich traceback for ``exc`` on stderr."""
    from rich.traceback import Traceback

    state = get_cli_state()
    traceback = Traceback.from_exception(
        type(exc), exc, exc.__traceback__, show_locals=state.verbosity >= 2
    )
    state.err_console.print(traceback)


def fail(exc: BaseException) -> typer.Exit:
    """Report ``exc`` and return the exit signal the command should raise."""
    if get_cli_state().show_tracebacks:
        print_traceback(exc)
    message = str(exc)
    hint = exception_hint(exc)
    if hint and hint != message:
        message = f"{message} ({hint})"
    emit_error(message, exception=exc)
    return typer.Exit(code=1)


__all__ = ["fail", "load_config", "print_traceback"]
