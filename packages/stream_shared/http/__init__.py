"""Public shared HTTP API for event stream packages."""

from .client import HttpClient, response_text
from .errors import (
    HttpClientError,
    HttpError,
    HttpRequestError,
    HttpStatusError,
)

__all__ = [
    "HttpClient",
    "HttpClientError",
    "HttpError",
    "HttpRequestError",
    "HttpStatusError",
    "response_text",
]
