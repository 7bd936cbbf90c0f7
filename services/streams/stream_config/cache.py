"""Partially populated, on-demand stream config cache.

The cache holds one *generation*: a mapping of stream name (or stream name
regex pattern) to that stream's settings. A generation starts from a full
fetch and grows as misses are fetched and merged in. Merges only add keys or
replace a requested key wholesale; only ``reset()`` ever drops keys. Regex
pattern keys are never expanded and only match by literal equality.

Concurrency contract:
- at most one in-flight fetch per missing name; later callers wait on and
  reuse the in-flight result,
- callers with disjoint missing names fetch in parallel,
- ``reset()`` is serialized with other resets, and a merge whose fetch began
  in an older generation is never written into a newer one.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterable
from concurrent.futures import Future

from packages.stream_shared.logging import (
    get_logger,
    log_context,
    public_api_instrumented,
)
from packages.stream_shared.logging import fields
from resources.adapters.stream_config import (
    StreamConfigLoader,
    StreamConfigs,
    StreamSettings,
)

_LOGGER = get_logger(__name__)
_COMPONENT = "stream_config_cache"


class StreamConfigCache:
    """Thread-safe stream config cache with batched fetch-on-miss."""

    def __init__(self, *, loader: StreamConfigLoader) -> None:
        """Create the cache and load generation 0 with a full fetch."""
        self._loader = loader
        self._lock = threading.Lock()
        self._reset_lock = threading.Lock()
        self._configs: StreamConfigs = {}
        self._generation = -1
        self._in_flight: dict[str, Future[StreamConfigs]] = {}
        self.reset()

    @property
    def generation(self) -> int:
        """Return the number of completed resets after the initial load."""
        with self._lock:
            return self._generation

    @public_api_instrumented(logger=_LOGGER, component=_COMPONENT)
    def reset(self) -> None:
        """Discard the current generation and replace it with a full fetch.

        A failed fetch leaves the current generation untouched.
        """
        with self._reset_lock:
            fetched = self._loader.load([])
            with self._lock:
                self._configs = dict(fetched)
                self._generation += 1
                generation = self._generation
        with log_context(
            {fields.GENERATION: generation, fields.STREAM_COUNT: len(fetched)}
        ):
            _LOGGER.info("Stream config cache reset")

    @public_api_instrumented(
        logger=_LOGGER, component=_COMPONENT, id_fields=("stream_names",)
    )
    def get_stream_configs(self, stream_names: Iterable[str]) -> StreamConfigs:
        """Return config entries for ``stream_names``, fetching only misses.

        All names missing from the current generation (and not already being
        fetched by another caller) are requested in one loader call. Names
        unknown to both cache and loader are omitted from the result.
        """
        requested = list(dict.fromkeys(stream_names))

        with self._lock:
            generation = self._generation
            to_fetch: list[str] = []
            waits: dict[int, Future[StreamConfigs]] = {}
            for name in requested:
                if name in self._configs:
                    continue
                pending = self._in_flight.get(name)
                if pending is not None:
                    waits[id(pending)] = pending
                else:
                    to_fetch.append(name)
            own: Future[StreamConfigs] | None = None
            if to_fetch:
                own = Future()
                for name in to_fetch:
                    self._in_flight[name] = own

        fresh: StreamConfigs = {}
        if own is not None:
            fresh.update(self._fetch_and_merge(to_fetch, own, generation))
        for pending in waits.values():
            fresh.update(pending.result())

        with self._lock:
            result: StreamConfigs = {}
            for name in requested:
                entry = self._configs.get(name, fresh.get(name))
                if entry is not None:
                    result[name] = copy.deepcopy(entry)
            return result

    def get_stream_config(self, stream_name: str) -> StreamSettings | None:
        """Return one stream's settings, or None if no source knows it."""
        return self.get_stream_configs([stream_name]).get(stream_name)

    def cached_stream_names(self) -> list[str]:
        """Return resident stream names in insertion order without fetching."""
        with self._lock:
            return list(self._configs)

    def cached_stream_configs(self) -> StreamConfigs:
        """Return a deep copy of the whole current generation."""
        with self._lock:
            return copy.deepcopy(self._configs)

    def _fetch_and_merge(
        self,
        stream_names: list[str],
        own: Future[StreamConfigs],
        generation: int,
    ) -> StreamConfigs:
        """Fetch ``stream_names`` once and merge every returned key."""
        with log_context({fields.STREAM: ",".join(stream_names)}):
            _LOGGER.info("Fetching uncached stream configs")
        try:
            fetched = self._loader.load(stream_names)
        except BaseException as exc:
            with self._lock:
                self._release(stream_names, own)
            own.set_exception(exc)
            raise

        requested = set(stream_names)
        with self._lock:
            if self._generation == generation:
                for name, entry in fetched.items():
                    # Sources that cannot filter return unrequested streams
                    # too; those only fill gaps.
                    if name in requested or name not in self._configs:
                        self._configs[name] = entry
            self._release(stream_names, own)
        own.set_result(fetched)
        return fetched

    def _release(self, stream_names: list[str], own: Future[StreamConfigs]) -> None:
        """Drop in-flight markers owned by ``own``; caller holds the lock."""
        for name in stream_names:
            if self._in_flight.get(name) is own:
                del self._in_flight[name]

    def __repr__(self) -> str:
        return f"{type(self).__name__} using {self._loader!r}"
