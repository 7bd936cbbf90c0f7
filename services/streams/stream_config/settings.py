"""Extract and flatten named settings from cached stream configs.

Stream settings are not individually typed. These helpers pull a setting by
name and flatten array values, leaving type coercion to the call site::

    {stream1: {topics: [t1, t2]}, stream2: {topics: t3}}
    collect_settings(cache, ["stream1", "stream2"], "topics") -> [t1, t2, t3]

An unknown stream and a stream without the setting both read as absent.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

from resources.adapters.stream_config import StreamConfigs
from services.streams.stream_config.cache import StreamConfigCache

TOPICS_SETTING = "topics"
SCHEMA_TITLE_SETTING = "schema_title"
EVENT_SERVICE_SETTING = "destination_event_service"


def setting_as_text(value: Any) -> str:
    """Render one JSON value as text; scalars use their JSON spelling."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"), sort_keys=True)


def get_setting(cache: StreamConfigCache, stream_name: str, setting_name: str) -> Any:
    """Return one setting value for one stream, or None when absent."""
    entry = cache.get_stream_config(stream_name)
    if entry is None:
        return None
    return entry.get(setting_name)


def get_setting_as_text(
    cache: StreamConfigCache, stream_name: str, setting_name: str
) -> str | None:
    """Return one setting value as text, or None when absent."""
    value = get_setting(cache, stream_name, setting_name)
    if value is None:
        return None
    return setting_as_text(value)


def collect_setting(
    cache: StreamConfigCache, stream_name: str, setting_name: str
) -> list[Any]:
    """Return one stream's setting values, flattening an array value."""
    return collect_settings(cache, [stream_name], setting_name)


def collect_setting_as_text(
    cache: StreamConfigCache, stream_name: str, setting_name: str
) -> list[str]:
    return [setting_as_text(value) for value in collect_setting(cache, stream_name, setting_name)]


def collect_settings(
    cache: StreamConfigCache, stream_names: Iterable[str], setting_name: str
) -> list[Any]:
    """Concatenate flattened setting values across streams, in the given order."""
    names = list(stream_names)
    return collect_values(cache.get_stream_configs(names), setting_name, order=names)


def collect_settings_as_text(
    cache: StreamConfigCache, stream_names: Iterable[str], setting_name: str
) -> list[str]:
    return [
        setting_as_text(value)
        for value in collect_settings(cache, stream_names, setting_name)
    ]


def collect_all_cached_settings(cache: StreamConfigCache, setting_name: str) -> list[Any]:
    """Flatten one setting across every resident stream; never fetches."""
    return collect_values(cache.cached_stream_configs(), setting_name)


def collect_all_cached_settings_as_text(
    cache: StreamConfigCache, setting_name: str
) -> list[str]:
    return [
        setting_as_text(value)
        for value in collect_all_cached_settings(cache, setting_name)
    ]


def collect_values(
    configs: StreamConfigs,
    setting_name: str,
    *,
    order: Iterable[str] | None = None,
) -> list[Any]:
    """Collect ``setting_name`` from each entry, flattening array values.

    Entries are visited in ``order`` when given, otherwise in mapping order.
    """
    names = list(dict.fromkeys(order)) if order is not None else list(configs)
    results: list[Any] = []
    for name in names:
        entry = configs.get(name)
        if not isinstance(entry, Mapping) or setting_name not in entry:
            continue
        value = entry[setting_name]
        if isinstance(value, list):
            results.extend(value)
        else:
            results.append(value)
    return results


def get_topics(cache: StreamConfigCache, stream_name: str) -> list[str]:
    """Return the topics composing one stream."""
    return collect_setting_as_text(cache, stream_name, TOPICS_SETTING)


def collect_topics(cache: StreamConfigCache, stream_names: Iterable[str]) -> list[str]:
    """Return the topics composing each of ``stream_names``, in order."""
    return collect_settings_as_text(cache, stream_names, TOPICS_SETTING)


def get_all_cached_topics(cache: StreamConfigCache) -> list[str]:
    """Return the topics of every resident stream."""
    return collect_all_cached_settings_as_text(cache, TOPICS_SETTING)


def get_schema_title(cache: StreamConfigCache, stream_name: str) -> str | None:
    return get_setting_as_text(cache, stream_name, SCHEMA_TITLE_SETTING)


def get_event_service_name(cache: StreamConfigCache, stream_name: str) -> str | None:
    return get_setting_as_text(cache, stream_name, EVENT_SERVICE_SETTING)
