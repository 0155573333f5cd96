"""CLI command implementations."""

from __future__ import annotations

from .postprocess import postprocess
from .render import render


__all__ = ["postprocess", "render"]
