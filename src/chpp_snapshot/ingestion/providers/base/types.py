from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from chpp_snapshot.db.enums import EntityKind

Row = Mapping[str, Any]


@dataclass(frozen=True)
class EndpointSpec:
    """One provider endpoint attempted per download, e.g. `worlddetails` v1.9."""

    name: str
    version: str
    required: bool = True
    user_id: int | None = None


@dataclass(frozen=True)
class AvatarLayer:
    """One image of a layered avatar, drawn with its top-left corner at (x, y)."""

    image: str
    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class EndpointPayload:
    """
    Parsed rows returned by one endpoint.

    `reference` rows are epoch-scoped and keyed by kind; `teams`/`players` are
    latest-state upserts. Avatars arrive as ready image bytes, as a single image URL, or
    as layers (first layer is the background) composited into one PNG.
    """

    reference: Mapping[EntityKind, list[Row]] = field(default_factory=dict)
    teams: list[Row] = field(default_factory=list)
    players: list[Row] = field(default_factory=list)
    avatars: Mapping[int, bytes] = field(default_factory=dict)
    avatar_urls: Mapping[int, str] = field(default_factory=dict)
    avatar_layers: Mapping[int, list[AvatarLayer]] = field(default_factory=dict)


@dataclass(frozen=True)
class FetchOk:
    payload: EndpointPayload


@dataclass(frozen=True)
class FetchErr:
    cause: str


FetchResult = FetchOk | FetchErr
