"""Schema repository resolver over one or more base URIs.

Schema repositories lay schemas out as ``<base>/<schema title>/<version>``
with a ``latest`` alias for the newest version. A relative pointer such as
``/mediawiki/revision/create/1.0.0`` is resolved by swapping the version
segment for ``latest`` and probing each base URI in order.

``$ref`` pointers inside schemas are returned as-is; dereferencing is left to
schema consumers.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from typing import Any

from packages.stream_shared.json_loader import JsonLoader, JsonLoadingError
from packages.stream_shared.logging import get_logger, public_api_instrumented
from resources.adapters.schema_repository.adapter import SchemaLoadError

_LOGGER = get_logger(__name__)
_COMPONENT = "schema_repository"

LATEST_VERSION = "latest"


def latest_schema_pointer(schema_pointer: str) -> str:
    """Replace the version segment of a relative schema pointer with ``latest``."""
    stripped = schema_pointer.strip().strip("/")
    if stripped == "":
        raise SchemaLoadError(message="Schema pointer must not be empty")
    title, _, _version = stripped.rpartition("/")
    if title == "":
        raise SchemaLoadError(
            message=f"Schema pointer {schema_pointer} has no version segment",
            uri=schema_pointer,
        )
    return f"/{title}/{LATEST_VERSION}"


class EventSchemaRepository:
    """Resolves and caches schemas from an ordered list of base URIs."""

    def __init__(
        self,
        *,
        base_uris: Sequence[str],
        json_loader: JsonLoader,
    ) -> None:
        if len(base_uris) == 0:
            raise ValueError("EventSchemaRepository requires at least one base URI")
        self._base_uris = tuple(uri.rstrip("/") for uri in base_uris)
        self._json_loader = json_loader
        self._lock = threading.Lock()
        self._schemas: dict[str, dict[str, Any]] = {}

    @property
    def base_uris(self) -> tuple[str, ...]:
        """Return base URIs in probing order."""
        return self._base_uris

    def latest_schema_uri(self, schema_pointer: str) -> str:
        """Return the first base URI that serves the latest ``schema_pointer``."""
        pointer = latest_schema_pointer(schema_pointer)
        failures: list[str] = []
        for base_uri in self._base_uris:
            candidate = base_uri + pointer
            try:
                self.load(candidate)
            except SchemaLoadError as exc:
                failures.append(str(exc))
                continue
            return candidate
        raise SchemaLoadError(
            message=(
                f"Schema {pointer} not found in any of {list(self._base_uris)}: "
                + "; ".join(failures)
            ),
            uri=pointer,
        )

    @public_api_instrumented(
        logger=_LOGGER, component=_COMPONENT, id_fields=("schema_uri",)
    )
    def load(self, schema_uri: str) -> dict[str, Any]:
        """Fetch, parse and cache the schema at ``schema_uri``."""
        with self._lock:
            cached = self._schemas.get(schema_uri)
        if cached is not None:
            return cached

        try:
            schema = self._json_loader.load(schema_uri)
        except JsonLoadingError as exc:
            raise SchemaLoadError(
                message=f"Failed loading schema at {schema_uri}. {exc}",
                uri=schema_uri,
                cause=exc,
            ) from exc
        if not isinstance(schema, dict):
            raise SchemaLoadError(
                message=f"Schema at {schema_uri} is not a JSON object",
                uri=schema_uri,
            )

        with self._lock:
            return self._schemas.setdefault(schema_uri, schema)

    def is_cached(self, schema_uri: str) -> bool:
        """Return True when ``schema_uri`` has already been loaded."""
        with self._lock:
            return schema_uri in self._schemas
