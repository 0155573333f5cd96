"""Facade for embedding Engrafo.

`RenderService` drives a complete job: staging the sources, running LaTeXML,
postprocessing the HTML and uploading the result. `postprocess` exposes the
DOM pipeline alone for callers that already hold LaTeXML output.

Usage Example
:
    >>> from engrafo.api import RenderJob, RenderService
    >>> job = RenderJob(input="paper/", output="build/")
    >>> job.postprocessing
    True
"""

from __future__ import annotations

from engrafo.core.pipeline import build_pipeline, postprocess, process_html

from .service import JobState, RenderJob, RenderService


__all__ = [
    "JobState",
    "RenderJob",
    "RenderService",
    "build_pipeline",
    "postprocess",
    "process_html",
]
