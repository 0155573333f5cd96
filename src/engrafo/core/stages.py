"""Stage declaration and execution engine for the postprocessing pipeline.

Postprocessing is a fixed sequence of named DOM transformations that share a
typed :class:`~engrafo.core.context.PostprocessContext`. Stages communicate
through that context, so their order is part of their contract. Instead of
leaving the contract implicit in a list, every stage declares it:

`Declaration layer`
: ``@stage`` stores a lightweight :class:`StageDefinition` on the callable,
  naming the capabilities it ``requires`` and the ones it ``provides``.

`Assembly layer`
: :class:`StagePipeline` binds definitions into :class:`Stage` instances and
  checks, at construction time, that every requirement is produced by an
  earlier stage and that a ``final`` stage closes the sequence.

`Execution layer`
: :meth:`StagePipeline.run` executes stages one after the other against the
  same tree and context. It never catches: the first failure aborts the run.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast

from .exceptions import PipelineDefinitionError


if TYPE_CHECKING:  # pragma: no cover - typing only
    from bs4 import BeautifulSoup

    from .context import PostprocessContext


StageCallable = Callable[["BeautifulSoup", "PostprocessContext"], None]


@dataclass(frozen=True)
class StageDefinition:
    """Descriptor installed on stage callables by the decorator."""

    name: str
    requires: tuple[str, ...] = ()
    provides: tuple[str, ...] = ()
    final: bool = False

    def bind(self, handler: StageCallable) -> Stage:
        """Create a concrete stage bound to the callable."""
        return Stage(
            name=self.name,
            handler=handler,
            requires=self.requires,
            provides=self.provides,
            final=self.final,
        )


@dataclass(frozen=True)
class Stage:
    """Concrete pipeline stage."""

    name: str
    handler: StageCallable
    requires: tuple[str, ...] = ()
    provides: tuple[str, ...] = ()
    final: bool = False

    def __call__(self, soup: BeautifulSoup, context: PostprocessContext) -> None:
        self.handler(soup, context)


def stage(
    name: str,
    *,
    requires: Iterable[str] = (),
    provides: Iterable[str] = (),
    final: bool = False,
) -> Callable[[StageCallable], StageCallable]:
    """Decorator used to declare a pipeline stage."""
    definition = StageDefinition(
        name=name,
        requires=tuple(requires),
        provides=tuple(provides),
        final=final,
    )

    def decorator(handler: StageCallable) -> StageCallable:
        cast(Any, handler).__stage__ = definition
        return handler

    return decorator


def as_stage(handler: StageCallable | Stage) -> Stage:
    """Return the bound stage for a decorated callable."""
    if isinstance(handler, Stage):
        return handler
    definition = getattr(handler, "__stage__", None)
    if not isinstance(definition, StageDefinition):
        msg = f"{getattr(handler, '__name__', handler)!r} must be decorated with @stage"
        raise TypeError(msg)
    return definition.bind(handler)


class StagePipeline:
    """Ordered, validated sequence of stages."""

    def __init__(self, stages: Iterable[StageCallable | Stage]) -> None:
        self._stages: tuple[Stage, ...] = tuple(as_stage(item) for item in stages)
        self._validate()

    @property
    def stages(self) -> Sequence[Stage]:
        """Return the stages in execution order."""
        return self._stages

    @property
    def names(self) -> list[str]:
        """Return stage names in execution order."""
        return [item.name for item in self._stages]

    def _validate(self) -> None:
        seen: set[str] = set()
        produced: set[str] = set()
        last_index = len(self._stages) - 1

        for index, item in enumerate(self._stages):
            if item.name in seen:
                raise PipelineDefinitionError(f"Duplicate stage name '{item.name}'")
            seen.add(item.name)

            missing = [capability for capability in item.requires if capability not in produced]
            if missing:
                raise PipelineDefinitionError(
                    f"Stage '{item.name}' requires {', '.join(sorted(missing))} "
                    "which no earlier stage provides"
                )

            if item.final and index != last_index:
                raise PipelineDefinitionError(f"Stage '{item.name}' must be the last stage")

            produced.update(item.provides)

    def run(self, soup: BeautifulSoup, context: PostprocessContext) -> BeautifulSoup:
        """Execute every stage in order against the same tree and context."""
        for item in self._stages:
            context.emitter.event("stage", {"name": item.name})
            item(soup, context)
        return soup

    def describe(self) -> list[dict[str, object]]:
        """Return a serialisable snapshot of the stage table."""
        return [
            {
                "order": order,
                "name": item.name,
                "requires": list(item.requires),
                "provides": list(item.provides),
                "final": item.final,
            }
            for order, item in enumerate(self._stages)
        ]


__all__ = [
    "Stage",
    "StageCallable",
    "StageDefinition",
    "StagePipeline",
    "as_stage",
    "stage",
]
