"""Stream config cache, settings extraction and event service directory."""

from services.streams.stream_config.cache import StreamConfigCache
from services.streams.stream_config.directory import (
    EventServiceDirectory,
    qualified_service_name,
)
from services.streams.stream_config.settings import (
    EVENT_SERVICE_SETTING,
    SCHEMA_TITLE_SETTING,
    TOPICS_SETTING,
    collect_all_cached_settings,
    collect_all_cached_settings_as_text,
    collect_setting,
    collect_setting_as_text,
    collect_settings,
    collect_settings_as_text,
    collect_topics,
    collect_values,
    get_all_cached_topics,
    get_event_service_name,
    get_schema_title,
    get_setting,
    get_setting_as_text,
    get_topics,
    setting_as_text,
)

__all__ = [
    "EVENT_SERVICE_SETTING",
    "EventServiceDirectory",
    "SCHEMA_TITLE_SETTING",
    "StreamConfigCache",
    "TOPICS_SETTING",
    "collect_all_cached_settings",
    "collect_all_cached_settings_as_text",
    "collect_setting",
    "collect_setting_as_text",
    "collect_settings",
    "collect_settings_as_text",
    "collect_topics",
    "collect_values",
    "get_all_cached_topics",
    "get_event_service_name",
    "get_schema_title",
    "get_setting",
    "get_setting_as_text",
    "get_topics",
    "qualified_service_name",
    "setting_as_text",
]
