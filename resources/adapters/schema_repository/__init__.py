"""Schema repository resource exports."""

from resources.adapters.schema_repository.adapter import SchemaLoadError, SchemaResolver
from resources.adapters.schema_repository.config import (
    build_schema_repository,
    resolve_schema_repository_settings,
)
from resources.adapters.schema_repository.repository import (
    LATEST_VERSION,
    EventSchemaRepository,
    latest_schema_pointer,
)

__all__ = [
    "LATEST_VERSION",
    "EventSchemaRepository",
    "SchemaLoadError",
    "SchemaResolver",
    "build_schema_repository",
    "latest_schema_pointer",
    "resolve_schema_repository_settings",
]
