"""Typeset math placeholders in serialised HTML.

The ``math`` stage leaves every formula as a MathJax-style script element::

    <script type="math/tex">x^{2}</script>
    <script type="math/tex; mode=display">\\sum_i x_i</script>

This module works on the serialised string rather than on the tree so the
renderer can process fragments as one asynchronous sweep. Fragments are
independent and may render concurrently, but substitution is driven by the
fragment index, never by completion order.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
import logging
import re
from typing import Protocol, runtime_checkable

from .exceptions import MathRenderError


logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 8

MATH_PLACEHOLDER_PATTERN = re.compile(
    r'<script type="math/tex(?P<display>; mode=display)?">(?P<tex>.*?)</script>',
    re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class MathFragment:
    """One formula awaiting typesetting."""

    index: int
    tex: str
    display: bool
    start: int
    end: int


@runtime_checkable
class MathRenderer(Protocol):
    """Interface implemented by typesetting backends."""

    async def render(self, fragment: MathFragment) -> str:
        """Return markup replacing the fragment placeholder."""
        ...


def find_math_fragments(html: str) -> list[MathFragment]:
    """Return every math placeholder in document order."""
    return [
        MathFragment(
            index=index,
            tex=match.group("tex"),
            display=match.group("display") is not None,
            start=match.start(),
            end=match.end(),
        )
        for index, match in enumerate(MATH_PLACEHOLDER_PATTERN.finditer(html))
    ]


def substitute_fragments(
    html: str, fragments: Sequence[MathFragment], rendered: Sequence[str]
) -> str:
    """Replace each placeholder with the output rendered for that fragment."""
    if len(fragments) != len(rendered):
        raise ValueError("Every fragment needs exactly one rendered replacement")

    parts: list[str] = []
    cursor = 0
    for fragment in sorted(fragments, key=lambda item: item.start):
        parts.append(html[cursor : fragment.start])
        parts.append(rendered[fragment.index])
        cursor = fragment.end
    parts.append(html[cursor:])
    return "".join(parts)


async def _render_fragment(
    renderer: MathRenderer,
    fragment: MathFragment,
    semaphore: asyncio.Semaphore,
) -> str:
    async with semaphore:
        try:
            return await renderer.render(fragment)
        except MathRenderError:
            raise
        except Exception as exc:
            raise MathRenderError(
                f"Failed to render math fragment #{fragment.index}: {fragment.tex!r}",
                fragment=fragment,
            ) from exc


async def render_math(
    html: str,
    renderer: MathRenderer,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> str:
    """Render every math placeholder of ``html`` and return the new document.

    The first failing fragment cancels the pending ones and raises
    :class:`MathRenderError`.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    fragments = find_math_fragments(html)
    if not fragments:
        return html

    logger.debug("Rendering %d math fragments", len(fragments))
    semaphore = asyncio.Semaphore(concurrency)
    tasks = [
        asyncio.ensure_future(_render_fragment(renderer, fragment, semaphore))
        for fragment in fragments
    ]
    try:
        rendered = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    return substitute_fragments(html, fragments, rendered)


__all__ = [
    "DEFAULT_CONCURRENCY",
    "MATH_PLACEHOLDER_PATTERN",
    "MathFragment",
    "MathRenderer",
    "find_math_fragments",
    "render_math",
    "substitute_fragments",
]
