"""Logging context carried through the call stack and into worker threads.

Fields bound here (stream, datacenter, destination address) are merged into
every log record by the filters in ``config``. Work submitted to a thread
pool does not inherit ``contextvars``; wrap it with ``in_current_context`` so
delivery workers log with the fields of the thread that scheduled them.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, copy_context
from typing import Any, Callable, Iterator, Mapping, TypeVar

_T = TypeVar("_T")

_LOG_CONTEXT: ContextVar[dict[str, str]] = ContextVar(
    "eventstreams_log_context", default={}
)


def get_context() -> dict[str, str]:
    """Return a shallow copy of current logging context."""
    return dict(_LOG_CONTEXT.get())


def _merged(values: Mapping[str, object]) -> dict[str, str]:
    merged = dict(_LOG_CONTEXT.get())
    for key, value in values.items():
        if value is not None:
            merged[str(key)] = str(value)
    return merged


def bind_context(**values: object) -> None:
    """Bind values for the rest of the current context.

    Values are stringified; ``None`` values are skipped.
    """
    _LOG_CONTEXT.set(_merged(values))


def clear_context() -> None:
    """Drop every bound field."""
    _LOG_CONTEXT.set({})


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Bind ``values`` for the duration of a block."""
    token = _LOG_CONTEXT.set(_merged(values))
    try:
        yield
    finally:
        _LOG_CONTEXT.reset(token)


def in_current_context(func: Callable[..., _T]) -> Callable[..., _T]:
    """Return ``func`` bound to a snapshot of the caller's context.

    Take one snapshot per submitted task: a snapshot cannot be entered by two
    threads at once.
    """
    snapshot = copy_context()

    def run(*args: Any, **kwargs: Any) -> _T:
        return snapshot.run(func, *args, **kwargs)

    return run
