"""Timing spans for ``--verbose`` runs.

A ``@traced`` service operation opens a root span; ``trace_span`` blocks
inside it add children (reading files, building the index). Each span
keeps integer counters such as documents read, posts indexed and
failures. The finished tree lands in ``ServiceResult.meta["telemetry"]``.
When tracing is off, both are a single ContextVar lookup.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from postreg.services.result import ServiceResult

_tracing: ContextVar[bool] = ContextVar("postreg_tracing", default=False)
_active: ContextVar[Span | None] = ContextVar("postreg_active_span", default=None)

log = structlog.get_logger(__name__)


@dataclass
class Span:
    name: str
    started: float = field(default_factory=time.perf_counter)
    elapsed_ms: float = 0.0
    counts: dict[str, int] = field(default_factory=dict)
    children: list[Span] = field(default_factory=list)

    def count(self, key: str, value: int) -> None:
        """Record a counter, e.g. ``span.count("posts", 12)``."""
        self.counts[key] = value

    def to_dict(self) -> dict[str, Any]:
        tree: dict[str, Any] = {"name": self.name, "duration_ms": round(self.elapsed_ms, 2)}
        if self.counts:
            tree["counts"] = dict(self.counts)
        if self.children:
            tree["children"] = [child.to_dict() for child in self.children]
        return tree


@contextmanager
def _activate(span: Span) -> Iterator[Span]:
    token = _active.set(span)
    try:
        yield span
    finally:
        span.elapsed_ms = (time.perf_counter() - span.started) * 1000
        _active.reset(token)
        log.debug("span", span=span.name, duration_ms=round(span.elapsed_ms, 2), **span.counts)


@contextmanager
def trace_span(name: str) -> Iterator[Span | None]:
    """Time a step of the current operation; yields None when not tracing."""
    parent = _active.get() if _tracing.get() else None
    if parent is None:
        yield None
        return
    child = Span(name)
    parent.children.append(child)
    with _activate(child):
        yield child


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(method: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Attach the operation's span tree to the ServiceResult it returns."""

    @functools.wraps(method)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _tracing.get():
            return method(*args, **kwargs)
        with _activate(Span(method.__qualname__)) as span:
            result = method(*args, **kwargs)
        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": span.to_dict()}
            return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
        return result

    return wrapper


def enable_tracing() -> None:
    """Turn on span collection for the rest of this context (``-v``)."""
    _tracing.set(True)
