"""Build event stream views over one set of shared collaborators."""

from __future__ import annotations

from collections.abc import Iterable

from packages.stream_shared.config import EventStreamsSettings
from packages.stream_shared.http import HttpClient
from packages.stream_shared.json_loader import JsonLoader
from resources.adapters.schema_repository import (
    SchemaResolver,
    build_schema_repository,
    resolve_schema_repository_settings,
)
from resources.adapters.stream_config import (
    StreamConfigLoader,
    build_stream_config_loader,
    resolve_stream_config_settings,
)
from services.streams.event_stream.stream import EventStream
from services.streams.stream_config import EventServiceDirectory, StreamConfigCache


class EventStreamFactory:
    """Owns the stream config cache, service directory and schema resolver."""

    def __init__(
        self,
        *,
        cache: StreamConfigCache,
        directory: EventServiceDirectory,
        schema_resolver: SchemaResolver,
    ) -> None:
        self._cache = cache
        self._directory = directory
        self._schema_resolver = schema_resolver
        self._owned_json_loaders: tuple[JsonLoader, ...] = ()

    @classmethod
    def from_settings(
        cls,
        settings: EventStreamsSettings,
        *,
        stream_config_loader: StreamConfigLoader | None = None,
        schema_resolver: SchemaResolver | None = None,
    ) -> EventStreamFactory:
        """Wire every collaborator from typed settings.

        Building the factory performs the cache's initial full fetch. Document
        loaders built here are released by ``close``; injected collaborators
        stay with their caller.
        """
        owned: list[JsonLoader] = []
        loader = stream_config_loader
        if loader is None:
            config_settings = resolve_stream_config_settings(settings)
            config_json_loader = _json_loader(config_settings.timeout_seconds)
            owned.append(config_json_loader)
            loader = build_stream_config_loader(
                config_settings, json_loader=config_json_loader
            )
        resolver = schema_resolver
        if resolver is None:
            schema_settings = resolve_schema_repository_settings(settings)
            schema_json_loader = _json_loader(schema_settings.timeout_seconds)
            owned.append(schema_json_loader)
            resolver = build_schema_repository(
                schema_settings, json_loader=schema_json_loader
            )

        try:
            cache = StreamConfigCache(loader=loader)
        except Exception:
            for json_loader in owned:
                json_loader.close()
            raise
        factory = cls(
            cache=cache,
            directory=EventServiceDirectory(settings.event_service.uris),
            schema_resolver=resolver,
        )
        factory._owned_json_loaders = tuple(owned)
        return factory

    def close(self) -> None:
        """Release the document loaders this factory built itself."""
        for json_loader in self._owned_json_loaders:
            json_loader.close()
        self._owned_json_loaders = ()

    def __enter__(self) -> EventStreamFactory:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    @property
    def cache(self) -> StreamConfigCache:
        return self._cache

    @property
    def directory(self) -> EventServiceDirectory:
        return self._directory

    @property
    def schema_resolver(self) -> SchemaResolver:
        return self._schema_resolver

    def create_event_stream(self, stream_name: str) -> EventStream:
        """Return a view of ``stream_name``; no config is fetched yet."""
        return EventStream(
            stream_name,
            cache=self._cache,
            directory=self._directory,
            schema_resolver=self._schema_resolver,
        )

    def create_event_streams(self, stream_names: Iterable[str]) -> list[EventStream]:
        """Return views for ``stream_names``, prefetching uncached configs at once."""
        names = list(dict.fromkeys(stream_names))
        self._cache.get_stream_configs(names)
        return [self.create_event_stream(name) for name in names]


def _json_loader(timeout_seconds: float) -> JsonLoader:
    return JsonLoader(http_client=HttpClient(timeout_seconds=timeout_seconds))
