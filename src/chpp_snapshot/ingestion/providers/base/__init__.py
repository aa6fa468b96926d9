from __future__ import annotations

from chpp_snapshot.ingestion.providers.base.adapter import SnapshotProvider
from chpp_snapshot.ingestion.providers.base.client import BaseHttpClient
from chpp_snapshot.ingestion.providers.base.errors import (
    ProviderError,
    ProviderRateLimited,
    ProviderRequestError,
    ProviderResponseError,
)
from chpp_snapshot.ingestion.providers.base.types import (
    AvatarLayer,
    EndpointPayload,
    EndpointSpec,
    FetchErr,
    FetchOk,
    FetchResult,
)

__all__ = [
    "AvatarLayer",
    "BaseHttpClient",
    "EndpointPayload",
    "EndpointSpec",
    "FetchErr",
    "FetchOk",
    "FetchResult",
    "ProviderError",
    "ProviderRateLimited",
    "ProviderRequestError",
    "ProviderResponseError",
    "SnapshotProvider",
]
