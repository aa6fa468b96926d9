from __future__ import annotations

from chpp_snapshot.core.errors import ValidationError
from chpp_snapshot.db.base import Base
from chpp_snapshot.db.enums import EntityKind
from chpp_snapshot.db.models import (
    Country,
    Cup,
    Currency,
    Language,
    League,
    Player,
    Region,
    Team,
    User,
)

REFERENCE_MODELS: dict[EntityKind, type[Base]] = {
    EntityKind.CUP: Cup,
    EntityKind.LANGUAGE: Language,
    EntityKind.CURRENCY: Currency,
    EntityKind.COUNTRY: Country,
    EntityKind.REGION: Region,
    EntityKind.LEAGUE: League,
    EntityKind.USER: User,
}

SINGLETON_MODELS: dict[EntityKind, type[Base]] = {
    EntityKind.TEAM: Team,
    EntityKind.PLAYER: Player,
}

# Referenced kinds first, so a partially written payload is still internally joinable.
REFERENCE_WRITE_ORDER: tuple[EntityKind, ...] = (
    EntityKind.LANGUAGE,
    EntityKind.CURRENCY,
    EntityKind.COUNTRY,
    EntityKind.REGION,
    EntityKind.LEAGUE,
    EntityKind.CUP,
    EntityKind.USER,
)


def reference_model(kind: EntityKind | str) -> type[Base]:
    try:
        return REFERENCE_MODELS[EntityKind(kind)]
    except (KeyError, ValueError) as e:
        raise ValidationError(f"{kind!r} is not an epoch-scoped reference kind") from e


def singleton_model(kind: EntityKind | str) -> type[Base]:
    try:
        return SINGLETON_MODELS[EntityKind(kind)]
    except (KeyError, ValueError) as e:
        raise ValidationError(f"{kind!r} is not a singleton kind") from e
