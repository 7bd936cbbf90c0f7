"""Event service resource exports."""

from resources.adapters.event_service.adapter import (
    DeliveryOutcome,
    EventPoster,
    StatusPredicate,
)
from resources.adapters.event_service.client import (
    DEFAULT_SUCCESS_STATUS_CODES,
    EventServiceClient,
    status_in,
)
from resources.adapters.event_service.config import (
    build_event_service_client,
    resolve_event_service_settings,
)

__all__ = [
    "DEFAULT_SUCCESS_STATUS_CODES",
    "DeliveryOutcome",
    "EventPoster",
    "EventServiceClient",
    "StatusPredicate",
    "build_event_service_client",
    "resolve_event_service_settings",
    "status_in",
]
