"""Per-stream view over cached stream config, directory and schemas."""

from __future__ import annotations

import copy
from typing import Any

from resources.adapters.schema_repository import (
    LATEST_VERSION,
    SchemaResolver,
)
from services.streams.stream_config import (
    EventServiceDirectory,
    StreamConfigCache,
    get_event_service_name,
    get_schema_title,
    get_setting,
    get_setting_as_text,
    get_topics,
)

EXAMPLES_KEYWORD = "examples"


class EventStream:
    """One named event stream and its configured settings.

    Every query reads through the shared stream config cache, so the first
    query for an uncached stream fetches its config. Missing settings read
    as None rather than raising.
    """

    def __init__(
        self,
        stream_name: str,
        *,
        cache: StreamConfigCache,
        directory: EventServiceDirectory,
        schema_resolver: SchemaResolver,
    ) -> None:
        self._stream_name = stream_name
        self._cache = cache
        self._directory = directory
        self._schema_resolver = schema_resolver

    @property
    def stream_name(self) -> str:
        return self._stream_name

    def get_setting(self, setting_name: str) -> Any:
        """Return one raw setting value, or None when absent."""
        return get_setting(self._cache, self._stream_name, setting_name)

    def get_setting_as_text(self, setting_name: str) -> str | None:
        return get_setting_as_text(self._cache, self._stream_name, setting_name)

    def topics(self) -> list[str]:
        """Return the topics that compose this stream."""
        return get_topics(self._cache, self._stream_name)

    def event_service_name(self) -> str | None:
        """Return the ``destination_event_service`` setting."""
        return get_event_service_name(self._cache, self._stream_name)

    def event_service_address(self, datacenter: str | None = None) -> str | None:
        """Return the POST address of this stream's event service.

        With ``datacenter`` the ``<service>-<datacenter>`` entry is used and
        there is no fallback to the bare service name.
        """
        service_name = self.event_service_name()
        if datacenter is None:
            return self._directory.resolve(service_name)
        return self._directory.resolve_for_datacenter(service_name, datacenter)

    def schema_title(self) -> str | None:
        return get_schema_title(self._cache, self._stream_name)

    def schema_location(self) -> str | None:
        """Return the concrete URI of this stream's latest schema.

        Returns None when the stream has no ``schema_title``. Raises
        ``SchemaLoadError`` when no schema repository serves the title.
        """
        title = self.schema_title()
        if title is None:
            return None
        pointer = f"/{title.strip('/')}/{LATEST_VERSION}"
        return self._schema_resolver.latest_schema_uri(pointer)

    def schema(self) -> dict[str, Any] | None:
        """Load this stream's latest schema document."""
        location = self.schema_location()
        if location is None:
            return None
        return self._schema_resolver.load(location)

    def example_event(self) -> dict[str, Any] | None:
        """Return a copy of the first ``examples`` entry in the latest schema."""
        schema = self.schema()
        if schema is None:
            return None
        examples = schema.get(EXAMPLES_KEYWORD)
        if not isinstance(examples, list) or len(examples) == 0:
            return None
        example = examples[0]
        if not isinstance(example, dict):
            return None
        return copy.deepcopy(example)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._stream_name!r})"
