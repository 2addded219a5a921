"""Operation timing for ``--verbose``.

Service methods decorated with :func:`traced` are timed while telemetry
is on. A method may attach key/value annotations (invoice id, caller) to
the running span through :func:`get_current_span`. When the method
returns a :class:`ServiceResult`, the span lands in
``result.meta["telemetry"]``; other return values pass through and the
span is only logged.

With telemetry off, the decorator costs one ``ContextVar`` lookup.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from invoicectl.services.result import ServiceResult

log = structlog.get_logger("invoicectl.telemetry")

_enabled: ContextVar[bool] = ContextVar("_enabled", default=False)
_active: ContextVar[Span | None] = ContextVar("_active", default=None)

_P = ParamSpec("_P")
_R = TypeVar("_R")


@dataclass
class Span:
    """Wall-clock timing of one service call."""

    name: str
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    def finish(self) -> None:
        self.finished = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        return data


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Time *func* and attach the span to a returned ServiceResult."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        span = Span(func.__qualname__)
        token = _active.set(span)
        try:
            result = func(*args, **kwargs)
        finally:
            span.finish()
            _active.reset(token)

        if not isinstance(result, ServiceResult):
            log.debug("span", span=span.name, duration_ms=round(span.duration_ms, 2))
            return result

        log.debug(
            "span",
            span=span.name,
            op=result.op,
            ok=result.ok,
            duration_ms=round(span.duration_ms, 2),
            **span.annotations,
        )
        meta = {**(result.meta or {}), "telemetry": span.to_dict()}
        return result.model_copy(update={"meta": meta})  # type: ignore[return-value]

    return wrapper


def enable_telemetry() -> None:
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    """The span of the innermost running traced call, if telemetry is on."""
    if not _enabled.get():
        return None
    return _active.get()
