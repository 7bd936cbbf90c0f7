"""Event stream view package exports."""

from services.streams.event_stream.factory import EventStreamFactory
from services.streams.event_stream.stream import EXAMPLES_KEYWORD, EventStream

__all__ = [
    "EXAMPLES_KEYWORD",
    "EventStream",
    "EventStreamFactory",
]
