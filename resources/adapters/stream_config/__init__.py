"""Stream config loader resource exports."""

from resources.adapters.stream_config.adapter import (
    StreamConfigFetchError,
    StreamConfigLoader,
    StreamConfigs,
    StreamConfigUriBuilder,
    StreamSettings,
    validate_stream_configs,
)
from resources.adapters.stream_config.config import (
    build_stream_config_loader,
    resolve_stream_config_settings,
)
from resources.adapters.stream_config.uri_loader import (
    MEDIAWIKI_STREAM_CONFIG_QUERY,
    StaticStreamConfigLoader,
    UriStreamConfigLoader,
    mediawiki_stream_config_loader,
    streams_param_uri_builder,
)

__all__ = [
    "MEDIAWIKI_STREAM_CONFIG_QUERY",
    "StaticStreamConfigLoader",
    "StreamConfigFetchError",
    "StreamConfigLoader",
    "StreamConfigUriBuilder",
    "StreamConfigs",
    "StreamSettings",
    "UriStreamConfigLoader",
    "build_stream_config_loader",
    "mediawiki_stream_config_loader",
    "resolve_stream_config_settings",
    "streams_param_uri_builder",
    "validate_stream_configs",
]
