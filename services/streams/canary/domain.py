"""Canary event contracts and assembly errors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

CANARY_DOMAIN = "canary"
"""Default ``meta.domain`` sentinel marking an event as a canary."""

CanaryEvent = dict[str, Any]

DestinationBatches = dict[str, list[CanaryEvent]]
"""Destination address -> canary events to POST there in one request."""


@dataclass(frozen=True)
class CanaryAssemblyError(Exception):
    """A canary event could not be built for a stream."""

    message: str
    stream_name: str = ""

    def __str__(self) -> str:
        """Return the human-readable error message."""
        return self.message


@dataclass(frozen=True)
class MissingExampleEventError(CanaryAssemblyError):
    """The stream's schema has no example event to build a canary from."""


@dataclass(frozen=True)
class MalformedExampleEventError(CanaryAssemblyError):
    """The example event is not an object with an object-valued ``meta``."""
