from __future__ import annotations

from pathlib import Path
import tarfile

import pytest

from engrafo.api import JobState, RenderJob, RenderService
from engrafo.core.config import EngrafoConfig
from engrafo.core.exceptions import EngrafoError, ExternalToolError, UploadError
from engrafo.core.math import MathFragment


class _StubRenderer:
    def __init__(self) -> None:
        self.fragments: list[MathFragment] = []

    async def render(self, fragment: MathFragment) -> str:
        self.fragments.append(fragment)
        return f"<svg>{fragment.tex}</svg>"


class _StubStorage:
    """Storage double recording transfers instead of calling the AWS CLI."""

    def __init__(self, archive: Path | None = None, *, fail_upload: bool = False) -> None:
        self.archive = archive
        self.fail_upload = fail_upload
        self.downloads: list[str] = []
        self.uploads: list[tuple[Path, str]] = []
        self.uploaded_files: dict[str, bytes] = {}

    def download(self, uri: str, destination: Path) -> Path:
        self.downloads.append(uri)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(self.archive.read_bytes())
        return destination

    def upload_directory(self, source: Path, uri: str) -> None:
        self.uploads.append((source, uri))
        if self.fail_upload:
            raise ExternalToolError("upload refused", exit_code=1)
        for path in sorted(source.rglob("*")):
            if path.is_file():
                relative = path.relative_to(source).as_posix()
                self.uploaded_files[relative] = path.read_bytes()


def _config(latexmlc: Path) -> EngrafoConfig:
    return EngrafoConfig(latexmlc=str(latexmlc), preloads=[], math_renderer="mathml")


def _states(emitter) -> list[str]:
    return [payload["state"] for payload in emitter.named("job_state")]


def test_render_directory(fake_latexmlc, paper_dir, tmp_path, emitter) -> None:
    service = RenderService(_config(fake_latexmlc), emitter=emitter, renderer=_StubRenderer())
    output = tmp_path / "out"

    html_path = service.render(RenderJob(input=str(paper_dir), output=str(output)))

    assert html_path == output.resolve() / "index.html"
    html = html_path.read_text(encoding="utf-8")
    assert "engrafo-container" in html
    assert "Fake paper" in html
    assert not (output / "LaTeXML.cache").exists()
    assert service.state is JobState.DONE
    assert _states(emitter) == ["pending", "input_staged", "rendered", "postprocessed", "done"]


def test_render_tex_file_input(fake_latexmlc, paper_dir, tmp_path, emitter) -> None:
    (paper_dir / "other.tex").write_text("\\documentclass{article}\n", encoding="utf-8")
    service = RenderService(_config(fake_latexmlc), emitter=emitter)

    html_path = service.render(
        RenderJob(input=str(paper_dir / "other.tex"), output=str(tmp_path / "out"))
    )

    assert "Body of other." in html_path.read_text(encoding="utf-8")


def test_render_without_postprocessing(fake_latexmlc, paper_dir, tmp_path, emitter) -> None:
    service = RenderService(_config(fake_latexmlc), emitter=emitter)

    html_path = service.render(
        RenderJob(input=str(paper_dir), output=str(tmp_path / "out"), postprocessing=False)
    )

    html = html_path.read_text(encoding="utf-8")
    assert "ltx_page_main" in html
    assert "engrafo-container" not in html
    assert "postprocessed" not in _states(emitter)


def test_latexml_failure_marks_job_failed(failing_latexmlc, paper_dir, tmp_path, emitter) -> None:
    service = RenderService(_config(failing_latexmlc), emitter=emitter)
    output = tmp_path / "out"

    with pytest.raises(ExternalToolError) as excinfo:
        service.render(RenderJob(input=str(paper_dir), output=str(output)))

    assert excinfo.value.exit_code == 2
    assert service.state is JobState.FAILED
    assert _states(emitter)[-1] == "failed"
    assert not (output / "index.html").exists()


def test_missing_input_fails_before_rendering(fake_latexmlc, tmp_path, emitter) -> None:
    service = RenderService(_config(fake_latexmlc), emitter=emitter)

    with pytest.raises(EngrafoError, match="does not exist"):
        service.render(RenderJob(input=str(tmp_path / "nope"), output=str(tmp_path / "out")))

    assert _states(emitter) == ["pending", "failed"]


def test_remote_input_and_output(fake_latexmlc, paper_dir, tmp_path, emitter) -> None:
    archive = tmp_path / "paper.tar.gz"
    with tarfile.open(archive, "w:gz") as bundle:
        bundle.add(paper_dir / "main.tex", arcname="main.tex")
    storage = _StubStorage(archive)
    service = RenderService(_config(fake_latexmlc), emitter=emitter, storage=storage)

    html_path = service.render(
        RenderJob(input="s3://bucket/paper.tar.gz", output="s3://bucket/html/")
    )

    assert storage.downloads == ["s3://bucket/paper.tar.gz"]
    [(uploaded, uri)] = storage.uploads
    assert uri == "s3://bucket/html/"
    assert html_path.parent == uploaded
    assert b"Body of main." in storage.uploaded_files["index.html"]
    assert not uploaded.exists()
    assert _states(emitter)[-2:] == ["uploaded", "done"]


def test_upload_failure(fake_latexmlc, paper_dir, emitter) -> None:
    storage = _StubStorage(fail_upload=True)
    service = RenderService(_config(fake_latexmlc), emitter=emitter, storage=storage)

    with pytest.raises(UploadError, match="upload refused"):
        service.render(RenderJob(input=str(paper_dir), output="s3://bucket/html/"))

    assert service.state is JobState.FAILED
    [(staged, _)] = storage.uploads
    assert not staged.exists()
