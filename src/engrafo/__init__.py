"""Engrafo converts LaTeX papers into readable, responsive HTML articles."""

from __future__ import annotations

from engrafo.api import (
    JobState,
    RenderJob,
    RenderService,
    build_pipeline,
    postprocess,
    process_html,
)
from engrafo.core.config import EngrafoConfig
from engrafo.core.exceptions import (
    CleanupError,
    EngrafoError,
    ExternalToolError,
    InputResolutionError,
    MalformedDocument,
    MathRenderError,
    PipelineDefinitionError,
    PostprocessingError,
    StageError,
    UploadError,
)
from engrafo.version import get_version


__version__ = get_version()

__all__ = [
    "CleanupError",
    "EngrafoConfig",
    "EngrafoError",
    "ExternalToolError",
    "InputResolutionError",
    "JobState",
    "MalformedDocument",
    "MathRenderError",
    "PipelineDefinitionError",
    "PostprocessingError",
    "RenderJob",
    "RenderService",
    "StageError",
    "UploadError",
    "__version__",
    "build_pipeline",
    "postprocess",
    "process_html",
]
