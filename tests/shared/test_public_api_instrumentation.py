"""Unit tests for public API instrumentation concerns and the decorator."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from opentelemetry.trace import StatusCode

from packages.stream_shared.logging.public_api import (
    CompletionContext,
    InvocationContext,
    PublicApiMetricsConcern,
    PublicApiTracingConcern,
    public_api_instrumented,
)


class _RecordingConcern:
    """Concern capturing invocation/completion events in order."""

    def __init__(self) -> None:
        self.invocations: list[InvocationContext] = []
        self.completions: list[CompletionContext] = []

    def on_invocation(self, context: InvocationContext) -> None:
        self.invocations.append(context)

    def on_completion(self, context: CompletionContext) -> None:
        self.completions.append(context)


class _ExplodingConcern:
    """Concern whose hooks always fail."""

    def on_invocation(self, context: InvocationContext) -> None:
        raise RuntimeError("invocation hook failed")

    def on_completion(self, context: CompletionContext) -> None:
        raise RuntimeError("completion hook failed")


class _FakeLogger:
    """Logger double recording messages per level."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def debug(self, message: str, *args: object) -> None:
        self.records.append(("debug", message))

    def info(self, message: str, *args: object) -> None:
        self.records.append(("info", message))

    def warning(self, message: str, *args: object) -> None:
        self.records.append(("warning", message))


class _FakeSpan:
    """In-memory fake span capturing attributes and lifecycle updates."""

    def __init__(self) -> None:
        self.attributes: dict[str, object] = {}
        self.statuses: list[object] = []
        self.ended = False

    def set_attribute(self, key: str, value: object) -> None:
        self.attributes[key] = value

    def set_status(self, status: object) -> None:
        self.statuses.append(status)

    def end(self) -> None:
        self.ended = True


class _FakeTracer:
    """Fake tracer returning tracked spans."""

    def __init__(self) -> None:
        self.names: list[str] = []
        self.spans: list[_FakeSpan] = []

    def start_span(self, name: str) -> _FakeSpan:
        self.names.append(name)
        span = _FakeSpan()
        self.spans.append(span)
        return span


class _FakeCounter:
    """In-memory fake counter recording each add call."""

    def __init__(self) -> None:
        self.calls: list[tuple[int | float, dict[str, object]]] = []

    def add(self, amount: int | float, attributes: dict[str, object]) -> None:
        self.calls.append((amount, dict(attributes)))


class _FakeHistogram:
    """In-memory fake histogram recording each sample."""

    def __init__(self) -> None:
        self.samples: list[tuple[float, dict[str, object]]] = []

    def record(self, amount: float, attributes: dict[str, object]) -> None:
        self.samples.append((amount, dict(attributes)))


class _FakeMeter:
    """Fake meter handing out named fake instruments."""

    def __init__(self) -> None:
        self.counters: dict[str, _FakeCounter] = {}
        self.histograms: dict[str, _FakeHistogram] = {}

    def create_counter(self, name: str, **_: object) -> _FakeCounter:
        return self.counters.setdefault(name, _FakeCounter())

    def create_histogram(self, name: str, **_: object) -> _FakeHistogram:
        return self.histograms.setdefault(name, _FakeHistogram())


@dataclass(frozen=True)
class _Outcome:
    success: bool
    message: str = ""


def _invocation() -> InvocationContext:
    return InvocationContext(
        component="event_service",
        api_name="post_events",
        references={"address": "https://eventgate.test/v1/events"},
    )


def test_decorator_binds_id_fields_from_positional_and_keyword_args() -> None:
    """Reference values should be resolved from either argument style."""
    concern = _RecordingConcern()

    @public_api_instrumented(
        component="stream_config_cache",
        id_fields=("stream_names", "label"),
        concerns=(concern,),
    )
    def fetch(stream_names: list[str], label: str = "") -> dict[str, object]:
        return {}

    fetch(["a", "b"], label="x")
    fetch(stream_names=["c"])

    assert concern.invocations[0].references == {"stream_names": "a,b", "label": "x"}
    assert concern.invocations[1].references == {"stream_names": "c"}
    assert concern.invocations[0].api_name == "fetch"


def test_decorator_reports_failed_outcomes_without_raising() -> None:
    """Outcome results and mappings of outcomes should drive the success flag."""
    concern = _RecordingConcern()

    @public_api_instrumented(component="canary_events", concerns=(concern,))
    def deliver() -> dict[str, _Outcome]:
        return {"a": _Outcome(True), "b": _Outcome(False, "Not Found")}

    result = deliver()

    assert set(result) == {"a", "b"}
    completion = concern.completions[0]
    assert completion.success is False
    assert completion.errors == ["b: Not Found"]
    assert completion.error_category == "delivery"


def test_decorator_reports_and_reraises_exceptions() -> None:
    """Exceptions should be reported as failures and propagate unchanged."""
    concern = _RecordingConcern()

    @public_api_instrumented(component="schema_repository", concerns=(concern,))
    def load() -> None:
        raise KeyError("missing")

    with pytest.raises(KeyError):
        load()

    completion = concern.completions[0]
    assert completion.success is False
    assert completion.error_category == "KeyError"


def test_decorator_isolates_concern_failures() -> None:
    """Broken concerns should never break the wrapped call."""
    logger = _FakeLogger()

    @public_api_instrumented(
        component="stream_config_cache",
        concerns=(_ExplodingConcern(),),
        logger=logger,
    )
    def reset() -> str:
        return "ok"

    assert reset() == "ok"
    assert ("warning", "Public API instrumentation concern failed") in logger.records
    assert ("info", "Public API completion") in logger.records


def test_tracing_concern_starts_and_ends_span_with_attributes() -> None:
    """Completion should set standard attributes and end the span."""
    tracer = _FakeTracer()
    concern = PublicApiTracingConcern(tracer=tracer)
    invocation = _invocation()

    concern.on_invocation(invocation)
    concern.on_completion(
        CompletionContext(
            invocation=invocation,
            success=True,
            duration_ms=12.3,
            errors=[],
            error_category=None,
        )
    )

    assert tracer.names == ["public_api.event_service.post_events"]
    span = tracer.spans[0]
    assert span.ended is True
    assert span.attributes["component"] == "event_service"
    assert span.attributes["reference.address"] == "https://eventgate.test/v1/events"
    assert span.attributes["success"] is True
    assert span.statuses == []


def test_tracing_concern_marks_failures_with_error_status() -> None:
    """Failed completions should set an error status on the span."""
    tracer = _FakeTracer()
    concern = PublicApiTracingConcern(tracer=tracer)
    invocation = _invocation()

    concern.on_invocation(invocation)
    concern.on_completion(
        CompletionContext(
            invocation=invocation,
            success=False,
            duration_ms=3.0,
            errors=["Not Found"],
            error_category="delivery",
        )
    )

    span = tracer.spans[0]
    assert span.attributes["errors.count"] == 1
    assert span.statuses[0].status_code == StatusCode.ERROR


def test_metrics_concern_emits_error_counter_only_for_failures() -> None:
    """Calls and durations are always recorded; errors only for failures."""
    meter = _FakeMeter()
    concern = PublicApiMetricsConcern(meter=meter)
    invocation = _invocation()

    for success in (True, False):
        concern.on_completion(
            CompletionContext(
                invocation=invocation,
                success=success,
                duration_ms=5.0,
                errors=[] if success else ["boom"],
                error_category=None if success else "delivery",
            )
        )

    calls = meter.counters["eventstreams_public_api_calls_total"].calls
    errors = meter.counters["eventstreams_public_api_errors_total"].calls
    durations = meter.histograms["eventstreams_public_api_duration_ms"].samples
    assert [attrs["outcome"] for _, attrs in calls] == ["success", "failure"]
    assert len(durations) == 2
    assert len(errors) == 1
    assert errors[0][1]["error_category"] == "delivery"
