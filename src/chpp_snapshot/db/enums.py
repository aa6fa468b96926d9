from __future__ import annotations

from enum import StrEnum


class DownloadStatus(StrEnum):
    OPEN = "open"
    COMPLETE = "complete"
    PARTIAL = "partial"
    PROMOTED = "promoted"
    RETIRED = "retired"


class EntryStatus(StrEnum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    EXHAUSTED = "exhausted"


class EntityKind(StrEnum):
    # Epoch-scoped reference data
    CUP = "cup"
    LANGUAGE = "language"
    CURRENCY = "currency"
    COUNTRY = "country"
    REGION = "region"
    LEAGUE = "league"
    USER = "user"

    # Singletons (latest state only)
    TEAM = "team"
    PLAYER = "player"
