from __future__ import annotations

import functools
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, TypeVar

from loguru import logger

from patternminer.core.settings import settings

T = TypeVar("T")


@dataclass
class Span:
    op: str
    tags: dict[str, Any] = field(default_factory=dict)
    elapsed_ms: float = 0.0
    ok: bool = True


def _emit(span: Span) -> None:
    slow_ms = float(settings.PERF_LOG_SLOW_MS)
    slow = span.elapsed_ms >= slow_ms
    if not (slow or settings.PERF_LOG_INNER_ALWAYS):
        return
    logger.log(
        "WARNING" if slow else "DEBUG",
        "PERF {op} {status}: {ms:.1f}ms tags={tags}",
        op=span.op,
        status="ok" if span.ok else "err",
        ms=span.elapsed_ms,
        tags=span.tags,
    )


@contextmanager
def perf_span(op: str, **tags: Any) -> Iterator[Span]:
    """Time a block and yield the Span being measured.

    Logged at WARNING when the block takes >= PERF_LOG_SLOW_MS, at DEBUG for
    every block when PERF_LOG_INNER_ALWAYS is set, otherwise not at all.
    None-valued tags are dropped. Exceptions propagate.
    """

    span = Span(op=op, tags={k: v for k, v in tags.items() if v is not None})
    t0 = time.perf_counter()
    try:
        yield span
    except Exception:
        span.ok = False
        raise
    finally:
        span.elapsed_ms = (time.perf_counter() - t0) * 1000.0
        if settings.PERF_LOG_ENABLED:
            _emit(span)


def timed(op: str | None = None, **fixed_tags: Any) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator form of perf_span; op defaults to module.qualname."""

    def deco(fn: Callable[..., T]) -> Callable[..., T]:
        name = op or f"{fn.__module__}.{fn.__qualname__}"

        @functools.wraps(fn)
        def wrapped(*args: Any, **kwargs: Any) -> T:
            with perf_span(name, **fixed_tags):
                return fn(*args, **kwargs)

        return wrapped

    return deco
