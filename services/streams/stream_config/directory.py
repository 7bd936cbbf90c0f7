"""Static event service name to destination address directory."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType


class EventServiceDirectory:
    """Maps event service names to POST addresses.

    Names may be bare (``eventgate-main``) or datacenter qualified by the
    ``<name>-<datacenter>`` convention (``eventgate-main-eqiad``). This only
    consults the mapping given at construction, never stream config.
    """

    def __init__(self, service_addresses: Mapping[str, str]) -> None:
        self._addresses = MappingProxyType(dict(service_addresses))

    @property
    def addresses(self) -> Mapping[str, str]:
        """Return a read-only view of the configured mapping."""
        return self._addresses

    def resolve(self, service_name: str | None) -> str | None:
        """Return the address of ``service_name``, or None when not configured."""
        if service_name is None:
            return None
        return self._addresses.get(service_name)

    def resolve_for_datacenter(
        self, service_name: str | None, datacenter: str
    ) -> str | None:
        """Return the ``<service_name>-<datacenter>`` address.

        There is no fallback to the bare name.
        """
        if service_name is None:
            return None
        return self.resolve(qualified_service_name(service_name, datacenter))


def qualified_service_name(service_name: str, datacenter: str) -> str:
    """Return the datacenter-qualified form of a service name."""
    return f"{service_name}-{datacenter}"
