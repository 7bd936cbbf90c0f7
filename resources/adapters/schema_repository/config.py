"""Builders wiring the schema repository from typed settings."""

from __future__ import annotations

from packages.stream_shared.config import (
    EventStreamsSettings,
    SchemaRepositorySettings,
)
from packages.stream_shared.http import HttpClient
from packages.stream_shared.json_loader import JsonLoader
from resources.adapters.schema_repository.repository import EventSchemaRepository


def resolve_schema_repository_settings(
    settings: EventStreamsSettings,
) -> SchemaRepositorySettings:
    """Resolve schema repository settings from ``schema_repository``."""
    return settings.schema_repository


def build_schema_repository(
    settings: SchemaRepositorySettings,
    *,
    json_loader: JsonLoader | None = None,
) -> EventSchemaRepository:
    """Build a schema repository resolver over the configured base URIs."""
    return EventSchemaRepository(
        base_uris=settings.base_uris,
        json_loader=json_loader
        or JsonLoader(http_client=HttpClient(timeout_seconds=settings.timeout_seconds)),
    )
