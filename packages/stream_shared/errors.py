"""Shared fetch error base for stream config and schema documents."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FetchError(Exception):
    """A remote or local document could not be fetched or parsed."""

    message: str
    uri: str = ""
    cause: Exception | None = None

    def __str__(self) -> str:
        """Return the human-readable error message."""
        return self.message
