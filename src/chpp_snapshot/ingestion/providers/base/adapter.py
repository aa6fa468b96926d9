from __future__ import annotations

from typing import Protocol

from .types import EndpointSpec, FetchResult


class SnapshotProvider(Protocol):
    """
    The download runner depends on this, not on any HTTP/XML client.

    Implementations own authentication, request signing, timeouts and parsing.
    """

    provider_key: str

    def endpoints(self) -> list[EndpointSpec]:
        """Endpoints to attempt for one download."""
        ...

    def fetch(self, endpoint: EndpointSpec) -> FetchResult:
        """
        Fetch + parse one endpoint. Expected failures come back as `FetchErr`;
        raising a `ProviderError` is tolerated and recorded the same way.
        """
        ...
