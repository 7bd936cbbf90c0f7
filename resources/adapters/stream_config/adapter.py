"""Transport-agnostic stream config loader contracts."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from packages.stream_shared.errors import FetchError

StreamSettings = dict[str, Any]
"""Setting name -> arbitrary JSON value for one stream."""

StreamConfigs = dict[str, StreamSettings]
"""Stream name (or stream name regex pattern) -> stream settings."""

StreamConfigUriBuilder = Callable[[Sequence[str]], str]
"""Strategy turning requested stream names into one fetch URI.

An empty sequence means "every stream the source knows about".
"""


@dataclass(frozen=True)
class StreamConfigFetchError(FetchError):
    """Stream config could not be fetched or was not a mapping of mappings."""


class StreamConfigLoader(Protocol):
    """Fetches stream config entries for a batch of stream names."""

    def load(self, stream_names: Sequence[str]) -> StreamConfigs:
        """Return config entries for ``stream_names``; empty means all streams."""


def validate_stream_configs(
    document: object, *, uri: str, response_key: str | None = None
) -> StreamConfigs:
    """Check a fetched document is a stream name -> settings object mapping."""
    if response_key is not None:
        if not isinstance(document, Mapping) or response_key not in document:
            raise StreamConfigFetchError(
                message=f"Stream config response from {uri} has no '{response_key}' key",
                uri=uri,
            )
        document = document[response_key]

    if not isinstance(document, Mapping):
        raise StreamConfigFetchError(
            message=f"Stream config response from {uri} must be a JSON object",
            uri=uri,
        )

    configs: StreamConfigs = {}
    for stream_name, settings in document.items():
        if not isinstance(settings, Mapping):
            raise StreamConfigFetchError(
                message=(
                    f"Stream config entry '{stream_name}' from {uri} "
                    "must be a JSON object"
                ),
                uri=uri,
            )
        configs[str(stream_name)] = dict(settings)
    return configs
