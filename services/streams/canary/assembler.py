"""Build canary events from schema example events."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from services.streams.canary.domain import (
    CANARY_DOMAIN,
    CanaryEvent,
    MalformedExampleEventError,
    MissingExampleEventError,
)


def make_canary_event(
    stream_name: str,
    example_event: Mapping[str, Any] | None,
    *,
    domain: str = CANARY_DOMAIN,
) -> CanaryEvent:
    """Return a canary copy of ``example_event`` for ``stream_name``.

    ``meta.domain`` is set to the canary sentinel, ``meta.stream`` to the
    target stream, and ``meta.dt`` is removed so the event intake service
    fills it in. Every other field is left as in the example, which is
    never modified.
    """
    if example_event is None:
        raise MissingExampleEventError(
            message=(
                f"Cannot make canary event for {stream_name}, "
                "stream schema has no example event"
            ),
            stream_name=stream_name,
        )
    if not isinstance(example_event, Mapping):
        raise MalformedExampleEventError(
            message=f"Example event for {stream_name} is not a JSON object",
            stream_name=stream_name,
        )

    canary = copy.deepcopy(dict(example_event))
    meta = canary.get("meta")
    if not isinstance(meta, dict):
        raise MalformedExampleEventError(
            message=f"Example event for {stream_name} has no meta object",
            stream_name=stream_name,
        )
    meta["domain"] = domain
    meta["stream"] = stream_name
    meta.pop("dt", None)
    return canary
