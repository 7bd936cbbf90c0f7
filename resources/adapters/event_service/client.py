"""Event service HTTP client over the shared httpx wrapper."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

import httpx

from packages.stream_shared.http import HttpClient, HttpError, response_text
from packages.stream_shared.logging import get_logger, public_api_instrumented
from resources.adapters.event_service.adapter import (
    DeliveryOutcome,
    StatusPredicate,
)

_LOGGER = get_logger(__name__)
_COMPONENT = "event_service"

# EventGate returns 201 for guaranteed success, 202 for hasty success and 207
# for partial success. Only 201 and 202 mean every event was accepted.
DEFAULT_SUCCESS_STATUS_CODES: frozenset[int] = frozenset({201, 202})


def status_in(codes: Iterable[int]) -> StatusPredicate:
    """Build a predicate accepting exactly the given status codes."""
    accepted = frozenset(codes)

    def is_success(status_code: int) -> bool:
        return status_code in accepted

    return is_success


class EventServiceClient:
    """POSTs JSON event batches to event service addresses."""

    def __init__(
        self,
        *,
        http_client: HttpClient | None = None,
        success_status_codes: Iterable[int] = DEFAULT_SUCCESS_STATUS_CODES,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._http_client = http_client or HttpClient(timeout_seconds=timeout_seconds)
        self._is_success = status_in(success_status_codes)

    def close(self) -> None:
        """Release the underlying HTTP client."""
        self._http_client.close()

    def __enter__(self) -> EventServiceClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def post_json(
        self, address: str, body: Any, is_success: StatusPredicate
    ) -> DeliveryOutcome:
        """POST ``body`` serialized as JSON and judge the status with ``is_success``.

        Local failures (connection refused, timeouts) are captured in the
        returned outcome instead of being raised.
        """
        try:
            response = self._http_client.post(
                address, json=body, raise_for_status=False
            )
        except HttpError as exc:
            return DeliveryOutcome.from_exception(exc)
        return _outcome_from_response(response, is_success)

    @public_api_instrumented(
        logger=_LOGGER, component=_COMPONENT, id_fields=("address",)
    )
    def post_events(
        self, address: str, events: Sequence[dict[str, Any]]
    ) -> DeliveryOutcome:
        """POST ``events`` as one JSON array to ``address``."""
        return self.post_json(address, list(events), self._is_success)

    __call__ = post_events


def _outcome_from_response(
    response: httpx.Response, is_success: StatusPredicate
) -> DeliveryOutcome:
    body = response_text(response)
    return DeliveryOutcome(
        success=is_success(response.status_code),
        status_code=response.status_code,
        message=response.reason_phrase,
        body=body or None,
    )
