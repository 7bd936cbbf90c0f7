"""Group canary events by destination and deliver them best-effort.

Every (datacenter, stream) pair whose datacenter-qualified event service is
configured contributes that stream's canary event to the batch keyed by the
resolved address. Pairs with no address are skipped; that datacenter does
not serve the stream's event service.

Batches are keyed by address, not by service name. Two services that
resolve to the same address share one batch.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor

from packages.stream_shared.config import CanarySettings, EventStreamsSettings
from packages.stream_shared.logging import (
    get_logger,
    in_current_context,
    log_context,
    public_api_instrumented,
)
from packages.stream_shared.logging import fields
from resources.adapters.event_service import (
    DeliveryOutcome,
    EventPoster,
    EventServiceClient,
    build_event_service_client,
    resolve_event_service_settings,
)
from services.streams.canary.assembler import make_canary_event
from services.streams.canary.domain import (
    CANARY_DOMAIN,
    CanaryEvent,
    DestinationBatches,
)
from services.streams.event_stream import EventStream, EventStreamFactory

_LOGGER = get_logger(__name__)
_COMPONENT = "canary_events"

DEFAULT_DATACENTERS: tuple[str, ...] = ("eqiad", "codfw")


class CanaryEventProducer:
    """Builds canary events for streams and POSTs them to every destination."""

    def __init__(
        self,
        *,
        event_stream_factory: EventStreamFactory,
        post_events: EventPoster,
        datacenters: Sequence[str] = DEFAULT_DATACENTERS,
        domain: str = CANARY_DOMAIN,
        max_workers: int = 8,
    ) -> None:
        if max_workers <= 0:
            raise ValueError("max_workers must be > 0")
        self._factory = event_stream_factory
        self._post_events = post_events
        self._datacenters = tuple(datacenters)
        self._domain = domain
        self._max_workers = max_workers
        self._owned_client: EventServiceClient | None = None
        self._owned_factory: EventStreamFactory | None = None

    @classmethod
    def from_settings(
        cls,
        settings: EventStreamsSettings,
        *,
        event_stream_factory: EventStreamFactory | None = None,
        post_events: EventPoster | None = None,
    ) -> CanaryEventProducer:
        """Wire a producer from typed settings and the default event client.

        Collaborators built here are released by ``close``.
        """
        canary: CanarySettings = settings.canary
        factory: EventStreamFactory | None = None
        if event_stream_factory is None:
            factory = EventStreamFactory.from_settings(settings)
            event_stream_factory = factory
        client: EventServiceClient | None = None
        if post_events is None:
            client = build_event_service_client(
                resolve_event_service_settings(settings)
            )
            post_events = client
        producer = cls(
            event_stream_factory=event_stream_factory,
            post_events=post_events,
            datacenters=canary.datacenters,
            domain=canary.domain,
            max_workers=canary.max_workers,
        )
        producer._owned_client = client
        producer._owned_factory = factory
        return producer

    @property
    def datacenters(self) -> tuple[str, ...]:
        return self._datacenters

    def close(self) -> None:
        """Release the event service client and factory this producer built."""
        if self._owned_client is not None:
            self._owned_client.close()
            self._owned_client = None
        if self._owned_factory is not None:
            self._owned_factory.close()
            self._owned_factory = None

    def canary_event(self, stream: EventStream) -> CanaryEvent:
        """Build the canary event for one stream from its schema example."""
        return make_canary_event(
            stream.stream_name, stream.example_event(), domain=self._domain
        )

    def build_destination_batches(
        self,
        stream_names: Iterable[str] | None = None,
        datacenters: Iterable[str] | None = None,
    ) -> DestinationBatches:
        """Group canary events for ``stream_names`` by destination address.

        With no ``stream_names`` every currently cached stream is used. Raises
        ``CanaryAssemblyError`` when a routed stream has no usable example.
        """
        names = (
            self._factory.cache.cached_stream_names()
            if stream_names is None
            else list(stream_names)
        )
        targets = self._datacenters if datacenters is None else tuple(datacenters)
        streams = self._factory.create_event_streams(names)

        canaries: dict[str, CanaryEvent] = {}
        batches: DestinationBatches = {}
        for datacenter in targets:
            for stream in streams:
                address = stream.event_service_address(datacenter)
                if address is None:
                    with log_context(
                        {
                            fields.STREAM: stream.stream_name,
                            fields.DATACENTER: datacenter,
                        }
                    ):
                        _LOGGER.debug("No event service address; skipping stream")
                    continue
                if stream.stream_name not in canaries:
                    canaries[stream.stream_name] = self.canary_event(stream)
                batches.setdefault(address, []).append(
                    copy.deepcopy(canaries[stream.stream_name])
                )
        return batches

    def deliver(
        self,
        batches: Mapping[str, Sequence[CanaryEvent]],
        post: EventPoster | None = None,
    ) -> dict[str, DeliveryOutcome]:
        """POST each batch to its address and return one outcome per address.

        Destinations are delivered concurrently and independently. A failing
        POST, including one that raises, never prevents the others.
        """
        if len(batches) == 0:
            return {}
        poster = post or self._post_events
        workers = min(self._max_workers, len(batches))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="canary-delivery"
        ) as executor:
            futures = {
                address: executor.submit(
                    in_current_context(_post_batch), poster, address, events
                )
                for address, events in batches.items()
            }
            outcomes = {address: future.result() for address, future in futures.items()}

        for address, outcome in outcomes.items():
            if outcome.success:
                continue
            with log_context(
                {
                    fields.ADDRESS: address,
                    fields.STATUS_CODE: outcome.status_code,
                    fields.EVENT_COUNT: len(batches[address]),
                }
            ):
                _LOGGER.warning("Canary event delivery failed: %s", outcome.message)
        return outcomes

    @public_api_instrumented(
        logger=_LOGGER, component=_COMPONENT, id_fields=("stream_names",)
    )
    def post_canary_events(
        self, stream_names: Iterable[str] | None = None
    ) -> dict[str, DeliveryOutcome]:
        """Build canary batches for ``stream_names`` and deliver them all."""
        return self.deliver(self.build_destination_batches(stream_names))


def _post_batch(
    post: EventPoster, address: str, events: Sequence[CanaryEvent]
) -> DeliveryOutcome:
    """Run one POST, capturing any local exception in the outcome."""
    with log_context({fields.ADDRESS: address, fields.EVENT_COUNT: len(events)}):
        try:
            return post(address, list(events))
        except Exception as exc:  # noqa: BLE001
            return DeliveryOutcome.from_exception(exc)
