"""Canary event assembly and distribution package exports."""

from services.streams.canary.assembler import make_canary_event
from services.streams.canary.domain import (
    CANARY_DOMAIN,
    CanaryAssemblyError,
    CanaryEvent,
    DestinationBatches,
    MalformedExampleEventError,
    MissingExampleEventError,
)
from services.streams.canary.engine import DEFAULT_DATACENTERS, CanaryEventProducer

__all__ = [
    "CANARY_DOMAIN",
    "CanaryAssemblyError",
    "CanaryEvent",
    "CanaryEventProducer",
    "DEFAULT_DATACENTERS",
    "DestinationBatches",
    "MalformedExampleEventError",
    "MissingExampleEventError",
    "make_canary_event",
]
