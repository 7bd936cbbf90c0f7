"""Builders wiring the event service client from typed settings."""

from __future__ import annotations

from packages.stream_shared.config import EventServiceSettings, EventStreamsSettings
from resources.adapters.event_service.client import EventServiceClient


def resolve_event_service_settings(
    settings: EventStreamsSettings,
) -> EventServiceSettings:
    """Resolve event service settings from ``event_service``."""
    return settings.event_service


def build_event_service_client(settings: EventServiceSettings) -> EventServiceClient:
    """Build an event service client with configured success semantics."""
    return EventServiceClient(
        success_status_codes=settings.success_status_codes,
        timeout_seconds=settings.timeout_seconds,
    )
