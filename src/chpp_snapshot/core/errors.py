from __future__ import annotations


class SnapshotError(RuntimeError):
    """Base exception for snapshot store failures."""


class FetchError(SnapshotError):
    """Network/parse failure at one endpoint. Recorded on the entry, never raised out of a run."""

    def __init__(self, endpoint: str, cause: str) -> None:
        super().__init__(f"{endpoint}: {cause}")
        self.endpoint = endpoint
        self.cause = cause


class ValidationError(SnapshotError):
    """Malformed row or duplicate natural id within an epoch batch."""


class ConflictError(SnapshotError):
    """Attachment content differs from the content already stored for the same key."""


class IntegrityError(SnapshotError):
    """Referential integrity violation (e.g. writing rows for an epoch that does not exist)."""


class ConcurrencyError(SnapshotError):
    """Operation targets an epoch that is retired, promoted, or owned by another writer."""


class PromotionError(SnapshotError):
    """Epoch is not in a state that allows promotion."""
