from __future__ import annotations

from chpp_snapshot.db.repos.reference.reference_repo import ReferenceRepository

__all__ = [
    "ReferenceRepository",
]
