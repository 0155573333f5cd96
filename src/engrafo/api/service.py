"""Render orchestration: LaTeX sources in, article HTML out."""

from __future__ import annotations

import asyncio
from enum import Enum
import logging
from pathlib import Path
import shutil
import tempfile

from pydantic import BaseModel, ConfigDict

from engrafo.adapters.latexml import render_latexml
from engrafo.adapters.math import create_math_renderer
from engrafo.adapters.storage import S3Storage, upload_output
from engrafo.core.config import EngrafoConfig
from engrafo.core.diagnostics import DiagnosticEmitter, NullEmitter, record_event
from engrafo.core.inputs import (
    is_remote,
    pick_latex_file,
    prepare_input_directory,
    prepare_output_directory,
)
from engrafo.core.math import MathRenderer
from engrafo.core.pipeline import process_html


logger = logging.getLogger(__name__)


class JobState(str, Enum):
    """Lifecycle of a render job."""

    PENDING = "pending"
    INPUT_STAGED = "input_staged"
    RENDERED = "rendered"
    POSTPROCESSED = "postprocessed"
    UPLOADED = "uploaded"
    DONE = "done"
    FAILED = "failed"


class RenderJob(BaseModel):
    """One conversion request."""

    model_config = ConfigDict(frozen=True)

    input: str
    output: str
    postprocessing: bool = True


class RenderService:
    """Run render jobs one after the other.

    The service keeps the state of the job in flight in :attr:`state` and
    reports every transition as a ``job_state`` diagnostic event.
    """

    def __init__(
        self,
        config: EngrafoConfig | None = None,
        *,
        emitter: DiagnosticEmitter | None = None,
        storage: S3Storage | None = None,
        renderer: MathRenderer | None = None,
    ) -> None:
        self.config = config or EngrafoConfig()
        self.emitter = emitter or NullEmitter()
        self.storage = storage or S3Storage(self.config.aws)
        self.renderer = renderer
        self.state = JobState.PENDING

    def _transition(self, state: JobState, detail: str | None = None) -> None:
        self.state = state
        payload: dict[str, str] = {"state": state.value}
        if detail:
            payload["detail"] = detail
        record_event(self.emitter, "job_state", payload)

    def render(self, job: RenderJob) -> Path:
        """Synchronous wrapper around :meth:`render_async`."""
        return asyncio.run(self.render_async(job))

    async def render_async(self, job: RenderJob) -> Path:
        """Render ``job`` and return the path of the produced ``index.html``.

        For an ``s3://`` output the files are staged in the working directory
        and removed once uploaded, so the returned path no longer exists.
        """
        self._transition(JobState.PENDING, job.input)
        workdir = Path(tempfile.mkdtemp(prefix="engrafo-job-"))
        try:
            html_path = await self._run(job, workdir)
        except Exception as exc:
            self._transition(JobState.FAILED, str(exc))
            raise
        finally:
            shutil.rmtree(workdir, ignore_errors=True)
        self._transition(JobState.DONE, str(html_path))
        return html_path

    async def _run(self, job: RenderJob, workdir: Path) -> Path:
        input_dir = prepare_input_directory(job.input, workdir=workdir, storage=self.storage)
        preferred = Path(job.input).name if job.input.endswith(".tex") else None
        tex_path = pick_latex_file(input_dir, preferred=preferred)
        output_dir = prepare_output_directory(job.output, workdir=workdir)
        self._transition(JobState.INPUT_STAGED, str(tex_path))

        html_path = await render_latexml(tex_path, output_dir, self.config)
        self._transition(JobState.RENDERED, str(html_path))

        if job.postprocessing:
            renderer = self.renderer or create_math_renderer(self.config)
            await process_html(html_path, self.config, renderer, emitter=self.emitter)
            self._transition(JobState.POSTPROCESSED)
        else:
            logger.info("Skipping postprocessing of %s", html_path)

        if is_remote(job.output):
            upload_output(self.storage, output_dir, job.output)
            self._transition(JobState.UPLOADED, job.output)

        return html_path


__all__ = ["JobState", "RenderJob", "RenderService"]
