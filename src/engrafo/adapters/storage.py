"""Remote object store access through the AWS command-line interface."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
import shutil
import subprocess

from engrafo.core.exceptions import EngrafoError, ExternalToolError, UploadError
from engrafo.core.inputs import S3_SCHEME, is_remote


class S3Storage:
    """Copy files between the local filesystem and S3 using ``aws s3 cp``."""

    def __init__(self, executable: str = "aws") -> None:
        self._explicit_executable = executable
        self._cached_executable: str | None = None

    def download(self, uri: str, destination: Path) -> Path:
        """Download a single object to ``destination`` and return the local path."""
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ExternalToolError(f"Unable to create '{destination.parent}': {exc}") from exc
        self._run(["s3", "cp", "--only-show-errors", uri, str(destination)])
        return destination

    def upload_directory(self, source: Path, uri: str) -> None:
        """Upload every file below ``source`` to the ``uri`` prefix."""
        self._run(["s3", "cp", "--recursive", "--only-show-errors", str(source), uri])

    def _run(self, args: Sequence[str]) -> subprocess.CompletedProcess[str]:
        command = [self._resolve_executable(), *args]
        try:
            result = subprocess.run(command, check=False, capture_output=True, text=True)
        except FileNotFoundError as exc:
            self._cached_executable = None
            raise ExternalToolError(
                "AWS CLI executable could not be located.", command=command
            ) from exc
        except OSError as exc:
            raise ExternalToolError(
                f"Failed to invoke the AWS CLI: {exc}", command=command
            ) from exc

        if result.returncode != 0:
            detail = (result.stderr or "").strip() or (result.stdout or "").strip()
            message = f"'aws {' '.join(args[:2])}' failed with exit code {result.returncode}"
            if detail:
                message = f"{message}: {detail}"
            raise ExternalToolError(message, exit_code=result.returncode, command=command)

        return result

    def _resolve_executable(self) -> str:
        if self._cached_executable:
            return self._cached_executable

        executable = shutil.which(self._explicit_executable)
        if executable is None:
            raise ExternalToolError(
                f"The AWS CLI ('{self._explicit_executable}') is required for {S3_SCHEME} "
                "locations but was not found on PATH."
            )
        self._cached_executable = executable
        return executable


def upload_output(storage: S3Storage, output_dir: Path, uri: str) -> None:
    """Upload the rendered output, reporting failures as :class:`UploadError`."""
    try:
        storage.upload_directory(output_dir, uri)
    except EngrafoError as exc:
        raise UploadError(f"Failed to upload '{output_dir}' to {uri}: {exc}") from exc


__all__ = ["S3_SCHEME", "S3Storage", "is_remote", "upload_output"]
