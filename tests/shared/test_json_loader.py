"""Unit tests for the JSON/YAML document loader."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from packages.stream_shared.errors import FetchError
from packages.stream_shared.http import HttpClient, HttpStatusError
from packages.stream_shared.json_loader import (
    JsonLoader,
    JsonLoadingError,
    parse_document,
)


def _loader(handler) -> JsonLoader:
    return JsonLoader(http_client=HttpClient(transport=httpx.MockTransport(handler)))


def test_parse_document_prefers_json_for_object_and_array_content() -> None:
    """Content starting with ``{`` or ``[`` should be parsed as JSON."""
    assert parse_document('  {"a": [1, 2]}') == {"a": [1, 2]}
    assert parse_document("\n[true, null]") == [True, None]


def test_parse_document_falls_back_to_yaml() -> None:
    """Other content should be parsed as YAML."""
    assert parse_document("title: demo\nexamples:\n  - v: 1\n") == {
        "title": "demo",
        "examples": [{"v": 1}],
    }


def test_parse_document_maps_parse_failures() -> None:
    """Malformed JSON should raise a typed loading error."""
    with pytest.raises(JsonLoadingError) as exc_info:
        parse_document('{"a": ', uri="file:///tmp/bad.json")

    assert exc_info.value.uri == "file:///tmp/bad.json"
    assert isinstance(exc_info.value, FetchError)


def test_load_reads_file_uris_and_bare_paths(tmp_path: Path) -> None:
    """file:// URIs and bare paths should both read from the filesystem."""
    document = tmp_path / "stream-config.yaml"
    document.write_text("stream.a:\n  topics: [t1]\n", encoding="utf-8")
    loader = JsonLoader()
    try:
        expected = {"stream.a": {"topics": ["t1"]}}
        assert loader.load(document.as_uri()) == expected
        assert loader.load(str(document)) == expected
    finally:
        loader.close()


def test_load_maps_missing_file_to_loading_error(tmp_path: Path) -> None:
    """Unreadable files should raise JsonLoadingError with the OS error as cause."""
    loader = JsonLoader()
    try:
        with pytest.raises(JsonLoadingError) as exc_info:
            loader.load(str(tmp_path / "missing.json"))
    finally:
        loader.close()

    assert isinstance(exc_info.value.cause, OSError)


def test_load_fetches_http_documents() -> None:
    """http(s) URIs should be fetched through the shared HTTP client."""
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, text='{"title": "demo"}', request=request)

    loader = _loader(handler)
    try:
        assert loader.load("https://schemas.test/demo/latest") == {"title": "demo"}
    finally:
        loader.close()

    assert requested == ["https://schemas.test/demo/latest"]


def test_load_maps_http_failures_to_loading_error() -> None:
    """Non-2xx responses should surface as JsonLoadingError."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="not found", request=request)

    loader = _loader(handler)
    try:
        with pytest.raises(JsonLoadingError) as exc_info:
            loader.load("https://schemas.test/demo/latest")
    finally:
        loader.close()

    assert exc_info.value.uri == "https://schemas.test/demo/latest"
    assert isinstance(exc_info.value.cause, HttpStatusError)


def test_load_rejects_unsupported_schemes() -> None:
    """Schemes other than file and http(s) are not supported."""
    loader = JsonLoader()
    try:
        with pytest.raises(JsonLoadingError, match="Unsupported URI scheme"):
            loader.load("ftp://example.test/doc.json")
    finally:
        loader.close()


def test_load_maps_undecodable_files_to_loading_error(tmp_path: Path) -> None:
    """Files that are not valid UTF-8 should raise JsonLoadingError."""
    document = tmp_path / "stream-config.json"
    document.write_bytes(b'{"s": {"topics": "\xff\xfe"}}')
    loader = JsonLoader()
    try:
        with pytest.raises(JsonLoadingError) as exc_info:
            loader.load(str(document))
    finally:
        loader.close()

    assert exc_info.value.uri == str(document)
    assert isinstance(exc_info.value.cause, UnicodeDecodeError)
