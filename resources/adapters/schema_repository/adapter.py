"""Schema resolver contracts consumed by event stream views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from packages.stream_shared.errors import FetchError


@dataclass(frozen=True)
class SchemaLoadError(FetchError):
    """A schema could not be located in, or loaded from, any repository."""


class SchemaResolver(Protocol):
    """Locates and loads JSONSchema documents from schema repositories."""

    def latest_schema_uri(self, schema_pointer: str) -> str:
        """Return the concrete URI of the latest version of ``schema_pointer``."""

    def load(self, schema_uri: str) -> dict[str, Any]:
        """Fetch and parse the schema document at ``schema_uri``."""
