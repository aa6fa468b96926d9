from __future__ import annotations

from chpp_snapshot.db.repos.roster.avatar_repo import AvatarRepository

__all__ = [
    "AvatarRepository",
]
