"""Stylesheets bundled with the package."""

from __future__ import annotations

from importlib import resources


def read_stylesheet(name: str) -> str:
    """Return the text of a bundled stylesheet."""
    return resources.files(__name__).joinpath(name).read_text(encoding="utf-8")


__all__ = ["read_stylesheet"]
