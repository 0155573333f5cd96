"""Typesetting backends used by the math rendering stage."""

from __future__ import annotations

import asyncio
import shutil

from latex2mathml.converter import convert as latex2mathml_convert

from engrafo.core.config import EngrafoConfig
from engrafo.core.exceptions import ExternalToolError, MathRenderError
from engrafo.core.math import MathFragment, MathRenderer


class MathJaxRenderer:
    """Render fragments to SVG with the MathJax ``tex2svg`` command."""

    def __init__(self, executable: str = "tex2svg") -> None:
        self._explicit_executable = executable
        self._cached_executable: str | None = None

    def _resolve_executable(self) -> str:
        if self._cached_executable:
            return self._cached_executable
        executable = shutil.which(self._explicit_executable)
        if executable is None:
            raise ExternalToolError(
                f"'{self._explicit_executable}' is required to typeset math but was not found."
            )
        self._cached_executable = executable
        return executable

    def command(self, fragment: MathFragment) -> list[str]:
        """Return the argument vector used for a fragment."""
        argv = [self._resolve_executable()]
        if not fragment.display:
            argv.append("--inline")
        argv.append(fragment.tex)
        return argv

    async def render(self, fragment: MathFragment) -> str:
        argv = self.command(fragment)
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ExternalToolError(f"Failed to invoke {argv[0]}: {exc}", command=argv) from exc

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            message = f"{argv[0]} exited with status {process.returncode}"
            if detail:
                message = f"{message}: {detail}"
            raise MathRenderError(message, fragment=fragment)

        svg = stdout.decode("utf-8").strip()
        if not svg:
            raise MathRenderError(f"{argv[0]} produced no output", fragment=fragment)
        return svg


class MathMLRenderer:
    """Convert fragments to MathML in-process with ``latex2mathml``."""

    async def render(self, fragment: MathFragment) -> str:
        display = "block" if fragment.display else "inline"
        return await asyncio.to_thread(latex2mathml_convert, fragment.tex, display=display)


def create_math_renderer(config: EngrafoConfig) -> MathRenderer:
    """Return the renderer selected by the configuration."""
    if config.math_renderer == "mathml":
        return MathMLRenderer()
    return MathJaxRenderer(config.tex2svg)


__all__ = ["MathJaxRenderer", "MathMLRenderer", "create_math_renderer"]
