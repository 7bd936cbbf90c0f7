"""Composable instrumentation helpers for public API methods.

One decorator, several concerns: logging, OpenTelemetry tracing and
OpenTelemetry metrics all observe the same invocation/completion events.
Concern failures are isolated from the wrapped call.
"""

from __future__ import annotations

from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass
from functools import lru_cache, wraps
from inspect import signature
from time import perf_counter
from typing import Any, Callable, Protocol, Sequence

from opentelemetry import metrics as otel_metrics
from opentelemetry import trace as otel_trace
from opentelemetry.trace import Span, Status, StatusCode

from . import fields
from .context import log_context

INSTRUMENTATION_NAME = "eventstreams.public_api"
METRIC_CALLS_TOTAL = "eventstreams_public_api_calls_total"
METRIC_DURATION_MS = "eventstreams_public_api_duration_ms"
METRIC_ERRORS_TOTAL = "eventstreams_public_api_errors_total"
METRIC_INSTRUMENTATION_FAILURES_TOTAL = (
    "eventstreams_public_api_instrumentation_failures_total"
)


@dataclass(frozen=True)
class InvocationContext:
    """Structured metadata describing one public API invocation."""

    component: str
    api_name: str
    references: Mapping[str, str]


@dataclass(frozen=True)
class CompletionContext:
    """Structured metadata describing one completed public API invocation."""

    invocation: InvocationContext
    success: bool
    duration_ms: float
    errors: list[str]
    error_category: str | None


class PublicApiInstrumentationConcern(Protocol):
    """Hook contract for one public API instrumentation concern."""

    def on_invocation(self, context: InvocationContext) -> None:
        """Handle invocation-start event for one method call."""

    def on_completion(self, context: CompletionContext) -> None:
        """Handle completion event for one method call."""


class PublicApiLoggingConcern:
    """Logging concern implementation for invocation/completion events."""

    def __init__(self, *, logger: Any) -> None:
        self._logger = logger

    def on_invocation(self, context: InvocationContext) -> None:
        """Emit standardized structured invocation-start log at debug level."""
        with log_context(_invocation_log_context(context)):
            self._logger.debug("Public API invocation")

    def on_completion(self, context: CompletionContext) -> None:
        """Emit standardized structured completion log."""
        payload = _invocation_log_context(context.invocation)
        payload.update(
            {
                fields.EVENT: fields.PUBLIC_API_COMPLETION_EVENT,
                fields.SUCCESS: context.success,
                fields.DURATION_MS: context.duration_ms,
                fields.ERRORS: context.errors or None,
                fields.ERROR_CATEGORY: context.error_category,
            }
        )
        with log_context(payload):
            if context.success:
                self._logger.info("Public API completion")
            else:
                self._logger.warning("Public API completion")


class PublicApiTracingConcern:
    """Tracing concern that opens one span per public API invocation."""

    def __init__(self, *, tracer: otel_trace.Tracer) -> None:
        self._tracer = tracer
        self._active_spans: ContextVar[tuple[Span, ...]] = ContextVar(
            "public_api_tracing_spans", default=()
        )

    def on_invocation(self, context: InvocationContext) -> None:
        """Start one span for the current invocation and attach metadata."""
        span = self._tracer.start_span(
            f"public_api.{context.component}.{context.api_name}"
        )
        span.set_attribute(fields.COMPONENT, context.component)
        span.set_attribute(fields.API_NAME, context.api_name)
        for key, value in context.references.items():
            span.set_attribute(f"reference.{key}", value)
        self._active_spans.set((*self._active_spans.get(), span))

    def on_completion(self, context: CompletionContext) -> None:
        """Finalize the current invocation span with completion metadata."""
        active = self._active_spans.get()
        if len(active) == 0:
            return
        span = active[-1]
        self._active_spans.set(active[:-1])

        span.set_attribute(fields.SUCCESS, context.success)
        span.set_attribute(fields.DURATION_MS, context.duration_ms)
        span.set_attribute("errors.count", len(context.errors))
        if not context.success:
            span.set_status(Status(StatusCode.ERROR, "; ".join(context.errors[:3])))
        span.end()


class PublicApiMetricsConcern:
    """Metrics concern recording call counts, latency and failures."""

    def __init__(self, *, meter: otel_metrics.Meter) -> None:
        self._calls_total = meter.create_counter(
            name=METRIC_CALLS_TOTAL,
            description="Count of public API invocations by component/method/outcome.",
            unit="1",
        )
        self._duration_ms = meter.create_histogram(
            name=METRIC_DURATION_MS,
            description="Public API invocation latency in milliseconds.",
            unit="ms",
        )
        self._errors_total = meter.create_counter(
            name=METRIC_ERRORS_TOTAL,
            description="Count of public API failures by error category.",
            unit="1",
        )
        self.instrumentation_failures_total = meter.create_counter(
            name=METRIC_INSTRUMENTATION_FAILURES_TOTAL,
            description="Count of instrumentation concern failures.",
            unit="1",
        )

    def on_invocation(self, context: InvocationContext) -> None:
        """No-op at invocation; metrics are emitted on completion."""
        del context

    def on_completion(self, context: CompletionContext) -> None:
        """Emit counters/histograms for completed invocation outcomes."""
        attrs = {
            fields.COMPONENT: context.invocation.component,
            fields.API_NAME: context.invocation.api_name,
            fields.OUTCOME: "success" if context.success else "failure",
        }
        self._calls_total.add(1, attributes=attrs)
        self._duration_ms.record(context.duration_ms, attributes=attrs)
        if not context.success:
            self._errors_total.add(
                1,
                attributes={
                    fields.COMPONENT: context.invocation.component,
                    fields.API_NAME: context.invocation.api_name,
                    fields.ERROR_CATEGORY: context.error_category or "unknown",
                },
            )


def public_api_instrumented(
    *,
    component: str,
    api_name: str | None = None,
    id_fields: tuple[str, ...] = (),
    concerns: Sequence[PublicApiInstrumentationConcern] | None = None,
    logger: Any | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorate one public API method with composable instrumentation concerns.

    ``id_fields`` names call arguments (positional or keyword) whose values
    are attached to logs and spans as references.
    """

    resolved_concerns: tuple[PublicApiInstrumentationConcern, ...] = (
        *(concerns or ()),
        _default_tracing_concern(),
        _default_metrics_concern(),
    )
    if logger is not None:
        resolved_concerns = (PublicApiLoggingConcern(logger=logger), *resolved_concerns)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        method_name = api_name or func.__name__
        func_signature = signature(func)

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            invocation = InvocationContext(
                component=component,
                api_name=method_name,
                references=_references(func_signature, id_fields, args, kwargs),
            )
            _emit_invocation(
                concerns=resolved_concerns, context=invocation, logger=logger
            )

            started = perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                _emit_completion(
                    concerns=resolved_concerns,
                    context=CompletionContext(
                        invocation=invocation,
                        success=False,
                        duration_ms=_elapsed_ms(started),
                        errors=[f"{type(exc).__name__}: {exc}"],
                        error_category=type(exc).__name__,
                    ),
                    logger=logger,
                )
                raise

            success, errors = _result_summary(result)
            _emit_completion(
                concerns=resolved_concerns,
                context=CompletionContext(
                    invocation=invocation,
                    success=success,
                    duration_ms=_elapsed_ms(started),
                    errors=errors,
                    error_category=None if success else "delivery",
                ),
                logger=logger,
            )
            return result

        return wrapper

    return decorator


def _elapsed_ms(started: float) -> float:
    return round((perf_counter() - started) * 1000.0, 3)


def _references(
    func_signature: Any,
    id_fields: tuple[str, ...],
    args: tuple[Any, ...],
    kwargs: Mapping[str, Any],
) -> dict[str, str]:
    """Resolve reference values for ``id_fields`` from one call's arguments."""
    if not id_fields:
        return {}
    try:
        bound = func_signature.bind_partial(*args, **kwargs).arguments
    except TypeError:
        bound = dict(kwargs)
    references: dict[str, str] = {}
    for name in id_fields:
        value = bound.get(name)
        if value in (None, ""):
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            value = ",".join(str(item) for item in value)
        references[name] = str(value)
    return references


def _result_summary(result: object) -> tuple[bool, list[str]]:
    """Infer success and error summaries from delivery-outcome-like results."""
    if isinstance(result, Mapping):
        outcomes = [
            (key, value)
            for key, value in result.items()
            if isinstance(getattr(value, "success", None), bool)
        ]
        errors = [
            f"{key}: {getattr(value, 'message', '')}"
            for key, value in outcomes
            if not value.success
        ]
        return len(errors) == 0, errors

    success = getattr(result, "success", None)
    if isinstance(success, bool):
        return success, [] if success else [str(getattr(result, "message", ""))]
    return True, []


def _invocation_log_context(context: InvocationContext) -> dict[str, object]:
    """Build common structured fields for one invocation event."""
    return {
        fields.EVENT: fields.PUBLIC_API_INVOCATION_EVENT,
        fields.COMPONENT: context.component,
        fields.API_NAME: context.api_name,
        **context.references,
    }


def _emit_invocation(
    *,
    concerns: Sequence[PublicApiInstrumentationConcern],
    context: InvocationContext,
    logger: Any | None,
) -> None:
    """Dispatch invocation event to concerns with failure isolation."""
    for concern in concerns:
        try:
            concern.on_invocation(context)
        except Exception as exc:  # noqa: BLE001
            _log_concern_failure(
                logger=logger,
                stage="invocation",
                concern=type(concern).__name__,
                exc=exc,
                invocation=context,
            )


def _emit_completion(
    *,
    concerns: Sequence[PublicApiInstrumentationConcern],
    context: CompletionContext,
    logger: Any | None,
) -> None:
    """Dispatch completion event to concerns with failure isolation."""
    for concern in concerns:
        try:
            concern.on_completion(context)
        except Exception as exc:  # noqa: BLE001
            _log_concern_failure(
                logger=logger,
                stage="completion",
                concern=type(concern).__name__,
                exc=exc,
                invocation=context.invocation,
            )


def _log_concern_failure(
    *,
    logger: Any | None,
    stage: str,
    concern: str,
    exc: Exception,
    invocation: InvocationContext,
) -> None:
    """Best-effort warning log and counter for concern hook failures."""
    _default_metrics_concern().instrumentation_failures_total.add(
        1,
        attributes={
            fields.COMPONENT: invocation.component,
            fields.API_NAME: invocation.api_name,
            fields.STAGE: stage,
            fields.CONCERN: concern,
        },
    )
    if logger is None:
        return
    with log_context(
        {
            fields.EVENT: fields.PUBLIC_API_INSTRUMENTATION_FAILURE_EVENT,
            fields.COMPONENT: invocation.component,
            fields.API_NAME: invocation.api_name,
            fields.STAGE: stage,
            fields.CONCERN: concern,
            fields.ERRORS: [f"{type(exc).__name__}: {exc}"],
        }
    ):
        logger.warning("Public API instrumentation concern failed")


@lru_cache(maxsize=1)
def _default_tracing_concern() -> PublicApiTracingConcern:
    """Build the process-wide OTel tracing concern."""
    return PublicApiTracingConcern(tracer=otel_trace.get_tracer(INSTRUMENTATION_NAME))


@lru_cache(maxsize=1)
def _default_metrics_concern() -> PublicApiMetricsConcern:
    """Build the process-wide OTel metrics concern."""
    return PublicApiMetricsConcern(meter=otel_metrics.get_meter(INSTRUMENTATION_NAME))
