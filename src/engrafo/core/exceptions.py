"""Custom exception hierarchy for the LaTeX to HTML rendering pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .math import MathFragment


class EngrafoError(RuntimeError):
    """Base exception for rendering failures."""


class InputResolutionError(EngrafoError):
    """Raised when the LaTeX input cannot be staged locally."""


class ExternalToolError(EngrafoError):
    """Raised when an external command fails to launch or exits non-zero."""

    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        command: Any = None,
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.command = command


class PostprocessingError(EngrafoError):
    """Raised when the rendered HTML cannot be postprocessed."""


class MalformedDocument(PostprocessingError):
    """Raised when the rendered HTML lacks an article root or any content."""


class StageError(PostprocessingError):
    """Raised when a stage meets a missing required structural element."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"[{stage}] {message}")
        self.stage = stage


class MathRenderError(PostprocessingError):
    """Raised when a math fragment cannot be typeset."""

    def __init__(self, message: str, *, fragment: MathFragment | None = None) -> None:
        super().__init__(message)
        self.fragment = fragment


class CleanupError(EngrafoError):
    """Raised when an intermediate artifact cannot be removed."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class UploadError(EngrafoError):
    """Raised when the output directory cannot be uploaded to the remote store."""


class PipelineDefinitionError(ValueError):
    """Raised when a stage sequence violates its declared capabilities."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "CleanupError",
    "EngrafoError",
    "ExternalToolError",
    "InputResolutionError",
    "MalformedDocument",
    "MathRenderError",
    "PipelineDefinitionError",
    "PostprocessingError",
    "StageError",
    "UploadError",
    "exception_hint",
    "exception_messages",
]
