"""Fetch and parse JSON or YAML documents from file or HTTP URIs.

Content whose first non-whitespace character is ``{`` or ``[`` is parsed as
JSON; anything else is parsed as YAML. JSON permits some unicode that YAML
does not, so JSON parsing is preferred whenever the content allows it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlsplit

import yaml

from packages.stream_shared.errors import FetchError
from packages.stream_shared.http import HttpClient, HttpError

_HTTP_SCHEMES = frozenset({"http", "https"})


@dataclass(frozen=True)
class JsonLoadingError(FetchError):
    """A document could not be read or parsed into JSON-compatible data."""


class JsonLoader:
    """Load documents by URI using a shared HTTP client for remote reads."""

    def __init__(self, *, http_client: HttpClient | None = None) -> None:
        self._http_client = http_client or HttpClient()

    def close(self) -> None:
        """Release the underlying HTTP client."""
        self._http_client.close()

    def load(self, uri: str) -> Any:
        """Read and parse the document at ``uri``."""
        return parse_document(self.read(uri), uri=uri)

    def read(self, uri: str) -> str:
        """Read raw document text from a ``file://``, path or HTTP URI."""
        scheme = urlsplit(uri).scheme.lower()
        if scheme in _HTTP_SCHEMES:
            try:
                return self._http_client.get_text(uri)
            except HttpError as exc:
                raise JsonLoadingError(
                    message=f"Failed fetching {uri}: {exc}", uri=uri, cause=exc
                ) from exc

        path = _file_path(uri)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise JsonLoadingError(
                message=f"Failed reading {uri}: {exc}", uri=uri, cause=exc
            ) from exc


def parse_document(data: str, *, uri: str = "") -> Any:
    """Parse JSON or YAML text into plain Python data."""
    stripped = data.lstrip()
    try:
        if stripped.startswith(("{", "[")):
            return json.loads(stripped)
        return yaml.safe_load(data)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise JsonLoadingError(
            message=f"Failed parsing document {uri or '<inline>'}: {exc}",
            uri=uri,
            cause=exc,
        ) from exc


def _file_path(uri: str) -> Path:
    """Resolve ``file://`` URIs and bare paths to local filesystem paths."""
    parts = urlsplit(uri)
    if parts.scheme.lower() == "file":
        return Path(unquote(parts.path))
    if parts.scheme == "" or len(parts.scheme) == 1:
        # Bare paths, including Windows drive letters parsed as a scheme.
        return Path(uri)
    raise JsonLoadingError(message=f"Unsupported URI scheme for {uri}", uri=uri)
