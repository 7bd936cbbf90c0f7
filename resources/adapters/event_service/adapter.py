"""Event service POST contracts and per-destination delivery outcomes."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

StatusPredicate = Callable[[int], bool]
"""Decides whether one HTTP status code counts as a successful POST."""


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of POSTing one batch of events to one destination.

    This is not called a response: it also represents failures caused by a
    local exception, in which case ``status_code`` is None and ``exception``
    holds the error.
    """

    success: bool
    status_code: int | None
    message: str
    body: str | None = None
    exception: Exception | None = None

    @property
    def caused_by_exception(self) -> bool:
        """Return True if this outcome represents a local failure."""
        return self.exception is not None

    @classmethod
    def from_exception(cls, exc: Exception) -> DeliveryOutcome:
        """Build a failed outcome from a local exception."""
        return cls(
            success=False,
            status_code=None,
            message=str(exc) or type(exc).__name__,
            exception=exc,
        )


class EventPoster(Protocol):
    """POSTs a batch of JSON events to one destination address."""

    def __call__(
        self, address: str, events: Sequence[dict[str, Any]]
    ) -> DeliveryOutcome:
        """Deliver ``events`` to ``address`` and report the outcome."""
