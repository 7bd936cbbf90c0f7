"""Event streams command-line interface implemented with Typer."""

from __future__ import annotations

import dataclasses
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import typer
from pydantic import ValidationError

from packages.stream_shared.config import EventStreamsSettings, load_settings
from packages.stream_shared.errors import FetchError
from packages.stream_shared.logging import configure_logging
from resources.adapters.event_service import (
    DeliveryOutcome,
    EventServiceClient,
    build_event_service_client,
    resolve_event_service_settings,
)
from services.streams.canary import CanaryAssemblyError, CanaryEventProducer
from services.streams.event_stream import EventStreamFactory
from services.streams.stream_config import collect_topics

SUCCESS_EXIT_CODE = 0
CONFIG_ERROR_EXIT_CODE = 2
ASSEMBLY_ERROR_EXIT_CODE = 3
FETCH_ERROR_EXIT_CODE = 4
DELIVERY_FAILURE_EXIT_CODE = 5


@dataclass(frozen=True)
class CliConfig:
    """Global CLI runtime options shared by every command."""

    config_path: Path | None
    as_json: bool
    log_level: str | None


def _serialize(value: Any) -> Any:
    """Convert result objects to JSON-serializable structures."""

    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, BaseException):
        return f"{type(value).__name__}: {value}"
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: _serialize(getattr(value, field.name))
            for field in dataclasses.fields(value)
        }
    if isinstance(value, dict):
        return {str(key): _serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_serialize(item) for item in value]
    return str(value)


def _emit_output(result: Any, as_json: bool, render: Callable[[Any], str]) -> None:
    """Render command output in requested format."""

    data = _serialize(result)
    if as_json:
        typer.echo(json.dumps(data, sort_keys=True, separators=(",", ":")))
        return
    typer.echo(render(data))


def _emit_error(exc: Exception, as_json: bool) -> None:
    """Render mapped errors to stderr."""

    if as_json:
        typer.echo(json.dumps({"error": str(exc)}), err=True)
        return
    typer.echo(f"error: {exc}", err=True)


def _render_names(items: list[Any]) -> str:
    """Render a list of stream names or topics."""
    if len(items) == 0:
        return "No entries found."
    return "\n".join(f"- {item}" for item in items)


def _render_batches(data: dict[str, Any]) -> str:
    """Render destination batches as address headings with event JSON."""
    if len(data) == 0:
        return "No destinations found."
    lines: list[str] = []
    for address in sorted(data):
        events = data[address]
        lines.append(f"{address} ({len(events)} events)")
        for event in events:
            lines.append(f"  {json.dumps(event, sort_keys=True)}")
    return "\n".join(lines)


def _render_outcomes(data: dict[str, Any]) -> str:
    """Render per-destination delivery outcomes."""
    if len(data) == 0:
        return "No destinations found."
    lines: list[str] = []
    for address in sorted(data):
        outcome = data[address]
        status = outcome.get("status_code")
        label = "ok" if outcome.get("success") else "FAILED"
        line = f"{label} {address}"
        if status is not None:
            line = f"{line} [{status}]"
        message = str(outcome.get("message") or "").strip()
        if message != "":
            line = f"{line} {message}"
        lines.append(line)
    return "\n".join(lines)


def _load_runtime_settings(cfg: CliConfig) -> EventStreamsSettings:
    """Load settings for one command and configure stderr logging."""
    cli_params: dict[str, Any] = {}
    if cfg.log_level is not None:
        cli_params["logging"] = {"level": cfg.log_level.upper()}
    settings = load_settings(cli_params=cli_params, config_path=cfg.config_path)
    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        service=settings.logging.service,
        environment=settings.logging.environment,
        stream=sys.stderr,
    )
    return settings


def _event_stream_factory(settings: EventStreamsSettings) -> EventStreamFactory:
    """Return the event stream factory used by stream and canary commands."""
    return EventStreamFactory.from_settings(settings)


def _event_service_client(settings: EventStreamsSettings) -> EventServiceClient:
    """Return the event service client used to POST canary events."""
    return build_event_service_client(resolve_event_service_settings(settings))


def _run_command(
    cfg: CliConfig,
    invoke: Callable[[EventStreamsSettings], Any],
    render: Callable[[Any], str],
) -> Any:
    """Execute one command and map outputs/errors to process semantics."""
    try:
        settings = _load_runtime_settings(cfg)
        result = invoke(settings)
    except (ValidationError, ValueError) as exc:
        _emit_error(exc, cfg.as_json)
        raise typer.Exit(code=CONFIG_ERROR_EXIT_CODE) from exc
    except CanaryAssemblyError as exc:
        _emit_error(exc, cfg.as_json)
        raise typer.Exit(code=ASSEMBLY_ERROR_EXIT_CODE) from exc
    except FetchError as exc:
        _emit_error(exc, cfg.as_json)
        raise typer.Exit(code=FETCH_ERROR_EXIT_CODE) from exc

    _emit_output(result, cfg.as_json, render)
    return result


def _require_config(ctx: typer.Context) -> CliConfig:
    """Return required CLI config from Typer context."""

    config = ctx.obj
    if not isinstance(config, CliConfig):
        raise RuntimeError("CLI configuration not initialized")
    return config


app = typer.Typer(no_args_is_help=True, help="Event streams command-line interface")
streams_app = typer.Typer(help="Stream config commands")
canary_app = typer.Typer(help="Canary event commands")


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        "--config",
        envvar="EVENTSTREAMS_CONFIG_PATH",
        help="YAML config file path",
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON output"),
    log_level: str | None = typer.Option(None, help="Override logging.level"),
) -> None:
    """Store global options for all commands."""

    ctx.obj = CliConfig(config_path=config, as_json=as_json, log_level=log_level)


@streams_app.command("list")
def streams_list(ctx: typer.Context) -> None:
    """List every stream in the stream config cache."""
    cfg = _require_config(ctx)

    def invoke(settings: EventStreamsSettings) -> list[str]:
        with _event_stream_factory(settings) as factory:
            return factory.cache.cached_stream_names()

    _run_command(cfg, invoke, _render_names)


@streams_app.command("topics")
def streams_topics(
    ctx: typer.Context,
    names: list[str] = typer.Argument(..., help="Stream names"),
) -> None:
    """List the topics composing the named streams."""
    cfg = _require_config(ctx)

    def invoke(settings: EventStreamsSettings) -> list[str]:
        with _event_stream_factory(settings) as factory:
            return collect_topics(factory.cache, names)

    _run_command(cfg, invoke, _render_names)


@canary_app.command("events")
def canary_events(
    ctx: typer.Context,
    names: list[str] = typer.Argument(..., help="Stream names"),
) -> None:
    """Print canary events grouped by destination address."""
    cfg = _require_config(ctx)

    def invoke(settings: EventStreamsSettings) -> Any:
        with _event_stream_factory(settings) as factory:
            producer = CanaryEventProducer.from_settings(
                settings, event_stream_factory=factory
            )
            try:
                return producer.build_destination_batches(names)
            finally:
                producer.close()

    _run_command(cfg, invoke, _render_batches)


@canary_app.command("post")
def canary_post(
    ctx: typer.Context,
    names: list[str] = typer.Argument(..., help="Stream names"),
) -> None:
    """POST canary events to every destination and report the outcomes."""
    cfg = _require_config(ctx)

    def invoke(settings: EventStreamsSettings) -> dict[str, DeliveryOutcome]:
        with _event_stream_factory(settings) as factory, _event_service_client(
            settings
        ) as client:
            producer = CanaryEventProducer.from_settings(
                settings, event_stream_factory=factory, post_events=client
            )
            return producer.post_canary_events(names)

    outcomes = _run_command(cfg, invoke, _render_outcomes)
    if any(not outcome.success for outcome in outcomes.values()):
        raise typer.Exit(code=DELIVERY_FAILURE_EXIT_CODE)
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


app.add_typer(streams_app, name="streams")
app.add_typer(canary_app, name="canary")


if __name__ == "__main__":
    app()
