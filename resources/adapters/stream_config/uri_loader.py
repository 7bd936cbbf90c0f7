"""Stream config loaders that read documents from file or HTTP URIs."""

from __future__ import annotations

import copy
import threading
from collections.abc import Sequence
from urllib.parse import quote

from packages.stream_shared.json_loader import JsonLoader, JsonLoadingError
from packages.stream_shared.logging import get_logger
from resources.adapters.stream_config.adapter import (
    StreamConfigFetchError,
    StreamConfigs,
    StreamConfigUriBuilder,
    validate_stream_configs,
)

_LOGGER = get_logger(__name__)

MEDIAWIKI_STREAM_CONFIG_QUERY = "?format=json&action=streamconfigs&all_settings=true"


def streams_param_uri_builder(
    base_uri: str,
    *,
    param_format: str = "&streams={streams}",
    delimiter: str = "|",
) -> StreamConfigUriBuilder:
    """Build a URI strategy appending a ``streams`` parameter to ``base_uri``.

    The delimiter is URL-encoded, so ``|`` (what the MediaWiki API expects)
    becomes ``%7C``. Requests for every stream use ``base_uri`` unchanged.
    If you are loading from a REST API, ``param_format`` might be
    ``/streams/{streams}`` instead.
    """
    encoded_delimiter = quote(delimiter, safe="")

    def make_uri(stream_names: Sequence[str]) -> str:
        if len(stream_names) == 0:
            return base_uri
        joined = encoded_delimiter.join(quote(name, safe="") for name in stream_names)
        return base_uri + param_format.format(streams=joined)

    return make_uri


class UriStreamConfigLoader:
    """Loads stream configs from the URI produced by an injected strategy."""

    def __init__(
        self,
        *,
        make_uri: StreamConfigUriBuilder,
        json_loader: JsonLoader,
        response_key: str | None = None,
    ) -> None:
        self._make_uri = make_uri
        self._json_loader = json_loader
        self._response_key = response_key

    def load(self, stream_names: Sequence[str]) -> StreamConfigs:
        """Fetch stream config entries for ``stream_names`` in one request."""
        uri = self._make_uri(list(stream_names))
        _LOGGER.debug("Fetching stream config from %s", uri)
        return _load_validated(
            json_loader=self._json_loader, uri=uri, response_key=self._response_key
        )


class StaticStreamConfigLoader:
    """Loads stream config once from a static URI.

    The source cannot filter by stream name, so every request returns the
    whole document.
    """

    def __init__(
        self,
        *,
        uri: str,
        json_loader: JsonLoader,
        response_key: str | None = None,
    ) -> None:
        self._uri = uri
        self._json_loader = json_loader
        self._response_key = response_key
        self._lock = threading.Lock()
        self._configs: StreamConfigs | None = None

    def load(self, stream_names: Sequence[str]) -> StreamConfigs:
        """Return the static document, fetching it on first use."""
        del stream_names
        with self._lock:
            if self._configs is None:
                self._configs = _load_validated(
                    json_loader=self._json_loader,
                    uri=self._uri,
                    response_key=self._response_key,
                )
            return copy.deepcopy(self._configs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._uri})"


def mediawiki_stream_config_loader(
    api_endpoint: str,
    *,
    json_loader: JsonLoader,
    response_key: str | None = None,
) -> UriStreamConfigLoader:
    """Build a loader for the MediaWiki EventStreamConfig API at ``api_endpoint``."""
    return UriStreamConfigLoader(
        make_uri=streams_param_uri_builder(
            api_endpoint.rstrip("?") + MEDIAWIKI_STREAM_CONFIG_QUERY
        ),
        json_loader=json_loader,
        response_key=response_key,
    )


def _load_validated(
    *, json_loader: JsonLoader, uri: str, response_key: str | None
) -> StreamConfigs:
    try:
        document = json_loader.load(uri)
    except JsonLoadingError as exc:
        raise StreamConfigFetchError(
            message=f"Failed loading stream config from {uri}: {exc}",
            uri=uri,
            cause=exc,
        ) from exc
    return validate_stream_configs(document, uri=uri, response_key=response_key)
