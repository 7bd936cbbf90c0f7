"""Typed configuration models for event stream runtime settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "eventstreams" / "eventstreams.yaml"

MEDIAWIKI_STREAM_CONFIG_URI = (
    "https://meta.wikimedia.org/w/api.php"
    "?format=json&action=streamconfigs&all_settings=true"
)

DEFAULT_SCHEMA_BASE_URIS: tuple[str, ...] = (
    "https://schema.wikimedia.org/repositories/primary/jsonschema",
    "https://schema.wikimedia.org/repositories/secondary/jsonschema",
)

# See also https://wikitech.wikimedia.org/wiki/Service_ports
DEFAULT_EVENT_SERVICE_URIS: dict[str, str] = {
    "eventgate-main": "https://eventgate-main.discovery.wmnet:4492/v1/events",
    "eventgate-main-eqiad": "https://eventgate-main.svc.eqiad.wmnet:4492/v1/events",
    "eventgate-main-codfw": "https://eventgate-main.svc.codfw.wmnet:4492/v1/events",
    "eventgate-analytics": (
        "https://eventgate-analytics.discovery.wmnet:4592/v1/events"
    ),
    "eventgate-analytics-eqiad": (
        "https://eventgate-analytics.svc.eqiad.wmnet:4592/v1/events"
    ),
    "eventgate-analytics-codfw": (
        "https://eventgate-analytics.svc.codfw.wmnet:4592/v1/events"
    ),
    "eventgate-analytics-external": (
        "https://eventgate-analytics-external.discovery.wmnet:4692/v1/events"
    ),
    "eventgate-analytics-external-eqiad": (
        "https://eventgate-analytics-external.svc.eqiad.wmnet:4692/v1/events"
    ),
    "eventgate-analytics-external-codfw": (
        "https://eventgate-analytics-external.svc.codfw.wmnet:4692/v1/events"
    ),
    "eventgate-logging-external": (
        "https://eventgate-logging-external.discovery.wmnet:4392/v1/events"
    ),
    "eventgate-logging-external-eqiad": (
        "https://eventgate-logging-external.svc.eqiad.wmnet:4392/v1/events"
    ),
    "eventgate-logging-external-codfw": (
        "https://eventgate-logging-external.svc.codfw.wmnet:4392/v1/events"
    ),
}


class LoggingSettings(BaseModel):
    """Structured logging configuration shared by all components."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "eventstreams"
    environment: str = "dev"


class StreamConfigSettings(BaseModel):
    """Where and how stream configuration documents are fetched."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    source: Literal["mediawiki", "static"] = "mediawiki"
    uri: str = MEDIAWIKI_STREAM_CONFIG_URI
    streams_param_format: str = "&streams={streams}"
    streams_param_delimiter: str = "|"
    response_key: str | None = None
    timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator("uri", mode="before")
    @classmethod
    def _validate_uri(cls, value: object) -> object:
        """Reject blank stream config URIs."""
        if isinstance(value, str):
            normalized = value.strip()
            if normalized == "":
                raise ValueError("stream_config.uri must be non-empty")
            return normalized
        return value

    @field_validator("streams_param_format")
    @classmethod
    def _validate_streams_param_format(cls, value: str) -> str:
        """Require the ``{streams}`` placeholder in the param format."""
        if "{streams}" not in value:
            raise ValueError(
                "stream_config.streams_param_format must contain '{streams}'"
            )
        return value


class SchemaRepositorySettings(BaseModel):
    """Ordered schema repository base URIs used to resolve stream schemas."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_uris: tuple[str, ...] = DEFAULT_SCHEMA_BASE_URIS
    timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator("base_uris")
    @classmethod
    def _validate_base_uris(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        """Require at least one non-blank base URI."""
        normalized = tuple(item.strip().rstrip("/") for item in value if item.strip())
        if len(normalized) == 0:
            raise ValueError("schema_repository.base_uris must not be empty")
        return normalized


class EventServiceSettings(BaseModel):
    """Event service addresses and POST success semantics."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    uris: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_EVENT_SERVICE_URIS)
    )
    success_status_codes: frozenset[int] = frozenset({201, 202})
    timeout_seconds: float = Field(default=10.0, gt=0)


class CanarySettings(BaseModel):
    """Canary event construction and distribution behavior."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    datacenters: tuple[str, ...] = ("eqiad", "codfw")
    domain: str = "canary"
    max_workers: int = Field(default=8, gt=0)


class EventStreamsSettings(BaseModel):
    """Root runtime settings resolved from cli/env/yaml/defaults sources."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    stream_config: StreamConfigSettings = Field(default_factory=StreamConfigSettings)
    schema_repository: SchemaRepositorySettings = Field(
        default_factory=SchemaRepositorySettings
    )
    event_service: EventServiceSettings = Field(default_factory=EventServiceSettings)
    canary: CanarySettings = Field(default_factory=CanarySettings)
