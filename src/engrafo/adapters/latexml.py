"""Run LaTeXML to produce the first-pass HTML rendering."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
import logging
from pathlib import Path

from engrafo.core.config import EngrafoConfig
from engrafo.core.exceptions import CleanupError, ExternalToolError


logger = logging.getLogger(__name__)

HTML_FILENAME = "index.html"

LineSink = Callable[[str], None]

_STREAM_LIMIT = 1024 * 1024


def build_latexmlc_command(tex_path: Path, html_path: Path, config: EngrafoConfig) -> list[str]:
    """Return the ``latexmlc`` argument vector for a LaTeX source."""
    argv = [
        config.latexmlc,
        "--dest",
        str(html_path),
        "--format",
        "html5",
        "--mathtex",
        "--svg",
        "--verbose",
    ]
    for preload in config.preloads:
        argv.extend(["--preload", preload])
    argv.append(str(tex_path))
    return argv


async def _forward_lines(stream: asyncio.StreamReader | None, sink: LineSink) -> None:
    if stream is None:
        return
    while True:
        line = await stream.readline()
        if not line:
            return
        sink(line.decode("utf-8", errors="replace").rstrip("\r\n"))


async def run_streaming(
    argv: Sequence[str],
    *,
    cwd: Path,
    stdout_sink: LineSink,
    stderr_sink: LineSink,
) -> int:
    """Run a command, forwarding each output line as it arrives, and return its exit code."""
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            limit=_STREAM_LIMIT,
        )
    except OSError as exc:
        raise ExternalToolError(f"Failed to launch {argv[0]}: {exc}", command=list(argv)) from exc

    await asyncio.gather(
        _forward_lines(process.stdout, stdout_sink),
        _forward_lines(process.stderr, stderr_sink),
    )
    return await process.wait()


def unlink_if_exists(path: Path) -> None:
    """Remove a file, ignoring only the case where it is already gone."""
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        raise CleanupError(f"Unable to remove '{path}': {exc}", path=path) from exc


def cleanup_artifacts(output_dir: Path, names: Sequence[str]) -> None:
    """Delete the intermediate files LaTeXML leaves next to the HTML."""
    for name in names:
        unlink_if_exists(output_dir / name)


async def render_latexml(
    tex_path: Path,
    output_dir: Path,
    config: EngrafoConfig | None = None,
) -> Path:
    """Render ``tex_path`` into ``output_dir`` and return the HTML path."""
    settings = config or EngrafoConfig()
    html_path = output_dir / HTML_FILENAME
    argv = build_latexmlc_command(tex_path, html_path, settings)

    logger.debug("Running %s", " ".join(argv))
    exit_code = await run_streaming(
        argv,
        cwd=tex_path.parent,
        stdout_sink=logger.info,
        stderr_sink=logger.warning,
    )
    if exit_code != 0:
        raise ExternalToolError(
            f"latexmlc exited with status {exit_code}",
            exit_code=exit_code,
            command=argv,
        )

    cleanup_artifacts(output_dir, settings.cleanup_files)
    return html_path


__all__ = [
    "HTML_FILENAME",
    "build_latexmlc_command",
    "cleanup_artifacts",
    "render_latexml",
    "run_streaming",
    "unlink_if_exists",
]
