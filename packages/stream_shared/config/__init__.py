"""Public API for shared event stream configuration utilities."""

from .loader import ENV_PREFIX, load_config, load_settings
from .models import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_EVENT_SERVICE_URIS,
    DEFAULT_SCHEMA_BASE_URIS,
    MEDIAWIKI_STREAM_CONFIG_URI,
    CanarySettings,
    EventServiceSettings,
    EventStreamsSettings,
    LoggingSettings,
    SchemaRepositorySettings,
    StreamConfigSettings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_EVENT_SERVICE_URIS",
    "DEFAULT_SCHEMA_BASE_URIS",
    "ENV_PREFIX",
    "MEDIAWIKI_STREAM_CONFIG_URI",
    "CanarySettings",
    "EventServiceSettings",
    "EventStreamsSettings",
    "LoggingSettings",
    "SchemaRepositorySettings",
    "StreamConfigSettings",
    "load_config",
    "load_settings",
]
