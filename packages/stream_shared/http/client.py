"""Minimal shared HTTP client wrapper over httpx."""

from __future__ import annotations

from typing import Any

import httpx

from .errors import HttpRequestError, HttpStatusError


def response_text(response: httpx.Response) -> str:
    """Return response text without raising secondary decode errors."""
    try:
        return response.text
    except Exception:  # noqa: BLE001
        return ""


class HttpClient:
    """Thin synchronous wrapper over ``httpx.Client``.

    One instance may be shared across worker threads; ``httpx.Client`` pools
    connections and is safe for concurrent requests. Redirects are followed.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Create a new shared HTTP client wrapper."""
        self._client = httpx.Client(
            timeout=timeout_seconds,
            follow_redirects=True,
            transport=transport,
        )

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    def close(self) -> None:
        """Close underlying transport resources."""
        self._client.close()

    def __enter__(self) -> HttpClient:
        """Enter context manager scope."""
        return self

    def __exit__(self, *_: object) -> None:
        """Exit context manager scope and close client."""
        self.close()

    def request(
        self,
        method: str,
        url: str,
        *,
        raise_for_status: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Issue one request and map transport/status failures to typed errors."""
        try:
            response = self._client.request(method=method, url=url, **kwargs)
        except httpx.RequestError as exc:
            request = _request_or_none(exc)
            request_url = str(request.url) if request is not None else url
            request_method = request.method if request is not None else method.upper()
            raise HttpRequestError(
                message=f"HTTP request failed for {request_method} {request_url}",
                method=request_method,
                url=request_url,
                cause=exc,
            ) from exc

        if raise_for_status and response.is_error:
            raise HttpStatusError(
                message=(
                    f"HTTP {response.status_code} for "
                    f"{response.request.method} {response.request.url}"
                ),
                method=response.request.method,
                url=str(response.request.url),
                status_code=response.status_code,
            )
        return response

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Issue one GET request."""
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Issue one POST request."""
        return self.request("POST", url, **kwargs)

    def get_text(self, url: str, **kwargs: Any) -> str:
        """Issue one GET request and return the decoded response body."""
        return self.get(url, **kwargs).text


def _request_or_none(exc: httpx.RequestError) -> httpx.Request | None:
    """Return the request attached to an httpx error, if one was set."""
    try:
        return exc.request
    except RuntimeError:
        return None
