"""Canonical logging field names for cross-component consistency.

Keeping names centralized prevents accidental drift between components and
the tracing/metrics attributes emitted alongside log lines.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"

# Public API invocation fields.
COMPONENT = "component"
API_NAME = "api_name"
PUBLIC_API_INVOCATION_EVENT = "public_api_invocation"
PUBLIC_API_COMPLETION_EVENT = "public_api_completion"
PUBLIC_API_INSTRUMENTATION_FAILURE_EVENT = "public_api_instrumentation_failure"
SUCCESS = "success"
DURATION_MS = "duration_ms"
ERRORS = "errors"
OUTCOME = "outcome"
ERROR_CATEGORY = "error_category"
STAGE = "stage"
CONCERN = "concern"

# Stream and delivery fields.
STREAM = "stream"
STREAM_COUNT = "stream_count"
GENERATION = "generation"
DATACENTER = "datacenter"
ADDRESS = "address"
STATUS_CODE = "status_code"
EVENT_COUNT = "event_count"
URI = "uri"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
