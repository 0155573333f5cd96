"""Configuration model used by the renderer.

EngrafoConfig

`latexmlc` (`str`)
: Executable used to convert LaTeX into HTML5. Resolved on `PATH` when it is
  not an absolute path.

`preloads` (`list[str]`)
: LaTeXML binding files passed with `--preload`, in order.

`cleanup_files` (`list[str]`)
: Intermediate files written by LaTeXML next to `index.html` and removed
  after every successful run.

`parser` (`str`)
: BeautifulSoup parser backend. Falls back to `html.parser` when the backend
  is not installed.

`static_url` (`str | None`)
: URL prefix of hosted stylesheets. When set, `engrafo.css` is linked from
  there instead of being inlined in the document head.

`highlight_code` (`bool`)
: Highlight code listings with Pygments when their language is known.

`math_renderer` (`"mathjax" | "mathml"`)
: Typesetting backend. `mathjax` calls the `tex2svg` command once per
  fragment and produces SVG, `mathml` converts fragments in-process with
  `latex2mathml`.

`tex2svg` (`str`)
: Executable used by the `mathjax` renderer.

`math_concurrency` (`int`)
: Maximum number of fragments typeset at the same time.

`aws` (`str`)
: AWS command-line executable used for `s3://` inputs and outputs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml


DEFAULT_PRELOADS: tuple[str, ...] = (
    "/app/latexml/engrafo.ltxml",
    "/usr/src/latexml/lib/LaTeXML/Package/hyperref.sty.ltxml",
)

DEFAULT_CLEANUP_FILES: tuple[str, ...] = (
    "LaTeXML.cache",
    "LaTeXML.css",
    "ltx-article.css",
    "ltx-listings.css",
)


class ConfigError(ValueError):
    """Raised when a configuration file cannot be loaded."""


class EngrafoConfig(BaseModel):
    """Settings shared by the render service, the pipeline and the CLI."""

    model_config = ConfigDict(extra="forbid")

    latexmlc: str = "latexmlc"
    preloads: list[str] = Field(default_factory=lambda: list(DEFAULT_PRELOADS))
    cleanup_files: list[str] = Field(default_factory=lambda: list(DEFAULT_CLEANUP_FILES))
    parser: str = "lxml"
    static_url: str | None = None
    highlight_code: bool = True
    math_renderer: Literal["mathjax", "mathml"] = "mathjax"
    tex2svg: str = "tex2svg"
    math_concurrency: int = Field(default=8, ge=1)
    aws: str = "aws"

    @field_validator("static_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.rstrip("/") or None

    @classmethod
    def from_file(cls, path: Path | str) -> EngrafoConfig:
        """Load settings from a YAML document."""
        config_path = Path(path)
        try:
            payload = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(f"Unable to read configuration file '{config_path}': {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in '{config_path}': {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ConfigError(f"Configuration file '{config_path}' must contain a mapping.")
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration in '{config_path}': {exc}") from exc

    def with_overrides(self, **overrides: Any) -> EngrafoConfig:
        """Return a copy where non-``None`` overrides replace current values."""
        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return self
        try:
            return self.model_validate({**self.model_dump(), **values})
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration override: {exc}") from exc


__all__ = [
    "DEFAULT_CLEANUP_FILES",
    "DEFAULT_PRELOADS",
    "ConfigError",
    "EngrafoConfig",
]
