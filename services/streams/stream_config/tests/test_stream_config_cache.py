"""Behavior tests for the on-demand stream config cache."""

from __future__ import annotations

import threading
from collections.abc import Sequence

import pytest

from resources.adapters.stream_config import StreamConfigFetchError, StreamConfigs
from services.streams.stream_config import StreamConfigCache


class _FakeLoader:
    """In-memory loader that filters a backing document by requested names."""

    def __init__(self, document: StreamConfigs) -> None:
        self.document = document
        self.calls: list[list[str]] = []
        self.fail_with: BaseException | None = None

    def load(self, stream_names: Sequence[str]) -> StreamConfigs:
        self.calls.append(list(stream_names))
        if self.fail_with is not None:
            raise self.fail_with
        if len(stream_names) == 0:
            return {name: dict(entry) for name, entry in self.document.items()}
        return {
            name: dict(self.document[name])
            for name in stream_names
            if name in self.document
        }


class _GatedLoader(_FakeLoader):
    """Loader that blocks named fetches until released.

    Each named fetch snapshots the backing document when it starts and
    signals ``entered`` so tests can sequence concurrent callers.
    """

    def __init__(self, document: StreamConfigs) -> None:
        super().__init__(document)
        self.entered = threading.Semaphore(0)
        self.release = threading.Event()
        self.failing: dict[str, Exception] = {}
        self._calls_lock = threading.Lock()

    def load(self, stream_names: Sequence[str]) -> StreamConfigs:
        if len(stream_names) == 0:
            return super().load(stream_names)
        document = self.document
        with self._calls_lock:
            self.calls.append(list(stream_names))
        self.entered.release()
        assert self.release.wait(timeout=5)
        for name in stream_names:
            if name in self.failing:
                raise self.failing[name]
        return {name: dict(document[name]) for name in stream_names if name in document}


def _document() -> StreamConfigs:
    return {
        "a": {"topics": ["eqiad.a", "codfw.a"]},
        "b": {"topics": "eqiad.b"},
        "c": {"schema_title": "test/event"},
    }


def test_initial_reset_loads_full_generation() -> None:
    """Construction should perform one full fetch with an empty name filter."""
    loader = _FakeLoader(_document())

    cache = StreamConfigCache(loader=loader)

    assert loader.calls == [[]]
    assert cache.generation == 0
    assert cache.cached_stream_names() == ["a", "b", "c"]


def test_get_stream_configs_fetches_only_missing_names_once() -> None:
    """Exactly one fetch should request exactly the uncached names."""
    loader = _FakeLoader({"a": {"topics": ["t-a"]}})
    cache = StreamConfigCache(loader=loader)
    loader.document.update({"x": {"topics": ["t-x"]}, "y": {"topics": ["t-y"]}})

    result = cache.get_stream_configs(["a", "x", "y", "x"])

    assert loader.calls == [[], ["x", "y"]]
    assert list(result) == ["a", "x", "y"]
    assert result["y"] == {"topics": ["t-y"]}


def test_get_stream_configs_skips_fetch_when_everything_is_cached() -> None:
    """No fetch should happen when all names are resident."""
    loader = _FakeLoader(_document())
    cache = StreamConfigCache(loader=loader)

    assert set(cache.get_stream_configs(["a", "b"])) == {"a", "b"}
    assert loader.calls == [[]]


def test_unknown_names_are_omitted_and_refetched_later() -> None:
    """Names no source knows about are absent, not errors."""
    loader = _FakeLoader(_document())
    cache = StreamConfigCache(loader=loader)

    assert cache.get_stream_configs(["missing"]) == {}
    assert cache.get_stream_config("missing") is None
    assert loader.calls == [[], ["missing"], ["missing"]]


def test_merge_never_alters_unrelated_cached_entries() -> None:
    """Fetching {x} must not touch a previously cached entry for an unrelated name."""
    loader = _FakeLoader(_document())
    cache = StreamConfigCache(loader=loader)
    # A source that cannot filter returns stale data for every stream.
    loader.document = {
        "a": {"topics": ["changed"]},
        "x": {"topics": ["t-x"]},
    }
    loader.load = lambda names: (  # type: ignore[method-assign]
        loader.calls.append(list(names)) or dict(loader.document)
    )

    cache.get_stream_configs(["x"])

    configs = cache.cached_stream_configs()
    assert configs["a"] == {"topics": ["eqiad.a", "codfw.a"]}
    assert configs["x"] == {"topics": ["t-x"]}


def test_returned_configs_are_copies() -> None:
    """Mutating a returned entry must not alter the cache."""
    cache = StreamConfigCache(loader=_FakeLoader(_document()))

    cache.get_stream_configs(["a"])["a"]["topics"].append("mutated")
    cache.cached_stream_configs()["b"]["topics"] = "mutated"

    assert cache.get_stream_config("a") == {"topics": ["eqiad.a", "codfw.a"]}
    assert cache.get_stream_config("b") == {"topics": "eqiad.b"}


def test_reset_replaces_generation_wholesale() -> None:
    """After reset the resident names equal exactly the full fetch result."""
    loader = _FakeLoader(_document())
    cache = StreamConfigCache(loader=loader)
    loader.document["late"] = {"topics": ["t-late"]}
    cache.get_stream_configs(["late"])
    loader.document = {"b": {"topics": "eqiad.b"}, "d": {}}

    cache.reset()

    assert cache.cached_stream_names() == ["b", "d"]
    assert cache.generation == 1


def test_failed_fetch_leaves_generation_untouched() -> None:
    """A failed miss fetch or reset must not change cached state."""
    loader = _FakeLoader(_document())
    cache = StreamConfigCache(loader=loader)
    loader.fail_with = StreamConfigFetchError(message="boom", uri="memory://x")

    with pytest.raises(StreamConfigFetchError):
        cache.get_stream_configs(["a", "new"])
    with pytest.raises(StreamConfigFetchError):
        cache.reset()

    assert cache.generation == 0
    assert cache.cached_stream_configs() == _document()

    loader.fail_with = None
    loader.document["new"] = {"topics": ["t-new"]}
    assert cache.get_stream_config("new") == {"topics": ["t-new"]}


class _Cancelled(BaseException):
    """Stands in for interpreter-level interruptions such as KeyboardInterrupt."""


def test_interrupted_fetch_releases_in_flight_names() -> None:
    """A fetch interrupted by a BaseException must not leave names marked in flight."""
    loader = _FakeLoader(_document())
    cache = StreamConfigCache(loader=loader)
    loader.document["new"] = {"topics": ["t-new"]}
    loader.fail_with = _Cancelled()

    with pytest.raises(_Cancelled):
        cache.get_stream_configs(["new"])

    loader.fail_with = None
    result: dict[str, StreamConfigs] = {}
    worker = threading.Thread(
        target=lambda: result.setdefault("configs", cache.get_stream_configs(["new"])),
        daemon=True,
    )
    worker.start()
    worker.join(timeout=5)

    assert worker.is_alive() is False
    assert result["configs"] == {"new": {"topics": ["t-new"]}}
    assert loader.calls == [[], ["new"], ["new"]]


def test_concurrent_callers_share_one_in_flight_fetch() -> None:
    """A second caller missing the same name should wait for the first fetch."""
    document = _document()
    loader = _GatedLoader({})
    cache = StreamConfigCache(loader=loader)
    loader.document = document
    results: dict[str, StreamConfigs] = {}

    first = threading.Thread(
        target=lambda: results.setdefault("first", cache.get_stream_configs(["a"]))
    )
    first.start()
    assert loader.entered.acquire(timeout=5)
    second = threading.Thread(
        target=lambda: results.setdefault(
            "second", cache.get_stream_configs(["a", "c"])
        )
    )
    second.start()
    # The second caller only fetches "c" once it has registered to wait on "a".
    assert loader.entered.acquire(timeout=5)
    loader.release.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert loader.calls == [[], ["a"], ["c"]]
    assert results["first"] == {"a": document["a"]}
    assert results["second"] == {"a": document["a"], "c": document["c"]}


def test_waiting_callers_see_the_in_flight_failure() -> None:
    """Callers waiting on a failed in-flight fetch re-raise the same error."""
    loader = _GatedLoader({})
    cache = StreamConfigCache(loader=loader)
    loader.document = _document()
    loader.failing["a"] = StreamConfigFetchError(message="boom", uri="memory://x")
    errors: list[Exception] = []

    def fetch(names: list[str]) -> None:
        try:
            cache.get_stream_configs(names)
        except StreamConfigFetchError as exc:
            errors.append(exc)

    first = threading.Thread(target=fetch, args=(["a"],))
    first.start()
    assert loader.entered.acquire(timeout=5)
    second = threading.Thread(target=fetch, args=(["a", "b"],))
    second.start()
    assert loader.entered.acquire(timeout=5)
    loader.release.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert len(errors) == 2
    assert errors[0] is errors[1]
    assert loader.calls == [[], ["a"], ["b"]]
    assert "a" not in cache.cached_stream_names()
    assert "b" in cache.cached_stream_names()


def test_disjoint_misses_fetch_in_parallel() -> None:
    """Callers missing different names should not wait for each other."""
    loader = _GatedLoader({})
    cache = StreamConfigCache(loader=loader)
    loader.document = _document()

    threads = [
        threading.Thread(target=cache.get_stream_configs, args=([name],))
        for name in ("a", "b")
    ]
    for thread in threads:
        thread.start()
    # Both fetches are in flight at once before either is released.
    assert loader.entered.acquire(timeout=5)
    assert loader.entered.acquire(timeout=5)
    loader.release.set()
    for thread in threads:
        thread.join(timeout=5)

    assert sorted(loader.calls) == [[], ["a"], ["b"]]
    assert set(cache.cached_stream_names()) == {"a", "b"}


def test_reset_during_fetch_discards_stale_merge() -> None:
    """A fetch that began before a reset must not be merged into the new generation."""
    loader = _GatedLoader({})
    cache = StreamConfigCache(loader=loader)
    loader.document = {"a": {"topics": ["old"]}}
    result: dict[str, StreamConfigs] = {}

    worker = threading.Thread(
        target=lambda: result.setdefault("a", cache.get_stream_configs(["a"]))
    )
    worker.start()
    assert loader.entered.acquire(timeout=5)
    loader.document = {"b": {"topics": ["new"]}}
    cache.reset()
    loader.release.set()
    worker.join(timeout=5)

    assert result["a"] == {"a": {"topics": ["old"]}}
    assert cache.cached_stream_names() == ["b"]
    assert cache.generation == 1
