"""Builders wiring stream config loaders from typed settings."""

from __future__ import annotations

from packages.stream_shared.config import EventStreamsSettings, StreamConfigSettings
from packages.stream_shared.http import HttpClient
from packages.stream_shared.json_loader import JsonLoader
from resources.adapters.stream_config.adapter import StreamConfigLoader
from resources.adapters.stream_config.uri_loader import (
    StaticStreamConfigLoader,
    UriStreamConfigLoader,
    streams_param_uri_builder,
)


def resolve_stream_config_settings(
    settings: EventStreamsSettings,
) -> StreamConfigSettings:
    """Resolve stream config source settings from ``stream_config``."""
    return settings.stream_config


def build_stream_config_loader(
    settings: StreamConfigSettings,
    *,
    json_loader: JsonLoader | None = None,
) -> StreamConfigLoader:
    """Build the configured stream config loader."""
    loader = json_loader or JsonLoader(
        http_client=HttpClient(timeout_seconds=settings.timeout_seconds)
    )
    if settings.source == "static":
        return StaticStreamConfigLoader(
            uri=settings.uri,
            json_loader=loader,
            response_key=settings.response_key,
        )
    return UriStreamConfigLoader(
        make_uri=streams_param_uri_builder(
            settings.uri,
            param_format=settings.streams_param_format,
            delimiter=settings.streams_param_delimiter,
        ),
        json_loader=loader,
        response_key=settings.response_key,
    )
