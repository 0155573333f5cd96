"""Staging of LaTeX sources and output directories."""

from __future__ import annotations

import gzip
import logging
from pathlib import Path
import re
import shutil
import tarfile
import tempfile
from typing import TYPE_CHECKING
import zipfile

from .exceptions import EngrafoError, InputResolutionError


if TYPE_CHECKING:  # pragma: no cover - typing only
    from engrafo.adapters.storage import S3Storage


logger = logging.getLogger(__name__)

S3_SCHEME = "s3://"


def is_remote(location: str | Path) -> bool:
    """Return True when the location designates the remote store."""
    return str(location).startswith(S3_SCHEME)


PREFERRED_MAIN_FILES: tuple[str, ...] = ("main.tex", "ms.tex", "paper.tex")

_DOCUMENTCLASS_PATTERN = re.compile(r"^[^%\n]*\\documentclass", re.MULTILINE)


def _extract_archive(archive: Path, destination: Path) -> None:
    """Unpack a tarball, zip file or gzipped single source into ``destination``."""
    try:
        if tarfile.is_tarfile(archive):
            with tarfile.open(archive) as bundle:
                bundle.extractall(destination, filter="data")
            return
        if zipfile.is_zipfile(archive):
            with zipfile.ZipFile(archive) as bundle:
                bundle.extractall(destination)
            return
        if archive.suffix == ".gz":
            # arXiv ships single-file submissions as a gzipped .tex file.
            target = destination / (archive.stem if archive.stem.endswith(".tex") else "main.tex")
            with gzip.open(archive, "rb") as source, target.open("wb") as sink:
                shutil.copyfileobj(source, sink)
            return
        shutil.copy2(archive, destination / archive.name)
    except (OSError, tarfile.TarError, zipfile.BadZipFile) as exc:
        raise InputResolutionError(f"Unable to extract '{archive}': {exc}") from exc


def _is_archive(path: Path) -> bool:
    name = path.name.lower()
    return name.endswith((".tar", ".tar.gz", ".tgz", ".zip", ".gz"))


def prepare_input_directory(
    source: str | Path,
    *,
    workdir: Path | None = None,
    storage: S3Storage | None = None,
) -> Path:
    """Return a local directory holding the LaTeX sources designated by ``source``.

    ``source`` may be a directory, a ``.tex`` file, an archive, or an
    ``s3://`` object. Archives and remote objects are unpacked below
    ``workdir``, which must be provided for them.
    """
    location = str(source)

    if is_remote(location):
        if storage is None or workdir is None:
            raise InputResolutionError(f"Cannot fetch {location} without a storage backend")
        name = location.rstrip("/").rsplit("/", 1)[-1] or "source"
        download_dir = workdir / "download"
        try:
            archive = storage.download(location, download_dir / name)
        except EngrafoError as exc:
            raise InputResolutionError(f"Unable to download {location}: {exc}") from exc
        input_dir = workdir / "input"
        input_dir.mkdir(parents=True, exist_ok=True)
        _extract_archive(archive, input_dir)
        return input_dir

    path = Path(source).expanduser()
    if not path.exists():
        raise InputResolutionError(f"Input '{path}' does not exist")
    if path.is_dir():
        return path.resolve()
    if path.suffix == ".tex":
        return path.resolve().parent
    if _is_archive(path):
        if workdir is None:
            raise InputResolutionError(f"Cannot unpack '{path}' without a working directory")
        input_dir = workdir / "input"
        input_dir.mkdir(parents=True, exist_ok=True)
        _extract_archive(path, input_dir)
        return input_dir

    raise InputResolutionError(
        f"Unsupported input '{path}': expected a directory, .tex file or archive"
    )


def _declares_documentclass(path: Path) -> bool:
    try:
        text = path.read_text(encoding="utf-8", errors="ignore")
    except OSError as exc:
        raise InputResolutionError(f"Unable to read '{path}': {exc}") from exc
    return _DOCUMENTCLASS_PATTERN.search(text) is not None


def pick_latex_file(input_dir: Path, *, preferred: str | None = None) -> Path:
    """Select the main LaTeX file of a source directory."""
    if preferred:
        candidate = input_dir / preferred
        if candidate.is_file():
            return candidate

    try:
        tex_files = sorted(path for path in input_dir.iterdir() if path.suffix == ".tex")
    except OSError as exc:
        raise InputResolutionError(f"Unable to list '{input_dir}': {exc}") from exc

    if not tex_files:
        raise InputResolutionError(f"No .tex files found in '{input_dir}'")
    if len(tex_files) == 1:
        return tex_files[0]

    main_files = [path for path in tex_files if _declares_documentclass(path)]
    if not main_files:
        raise InputResolutionError(f"No .tex file in '{input_dir}' declares \\documentclass")
    if len(main_files) == 1:
        return main_files[0]

    for name in PREFERRED_MAIN_FILES:
        for path in main_files:
            if path.name == name:
                return path

    logger.warning(
        "Several .tex files declare \\documentclass in %s, using %s",
        input_dir,
        main_files[0].name,
    )
    return main_files[0]


def prepare_output_directory(output: str | Path, *, workdir: Path | None = None) -> Path:
    """Return a local directory receiving the rendered files.

    Remote outputs are staged below ``workdir`` when given, so that they are
    removed together with it, and in a fresh temporary directory otherwise.
    """
    location = str(output)
    if is_remote(location):
        if workdir is None:
            return Path(tempfile.mkdtemp(prefix="engrafo-output-"))
        staging = workdir / "output"
        try:
            staging.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise InputResolutionError(f"Unable to create '{staging}': {exc}") from exc
        return staging

    path = Path(output).expanduser()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise InputResolutionError(f"Unable to create output directory '{path}': {exc}") from exc
    return path.resolve()


__all__ = [
    "PREFERRED_MAIN_FILES",
    "S3_SCHEME",
    "is_remote",
    "pick_latex_file",
    "prepare_input_directory",
    "prepare_output_directory",
]
