from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from chpp_snapshot.db.models.roster.avatar import Avatar
from chpp_snapshot.db.repos.base import BaseRepository


class AvatarRepository(BaseRepository[Avatar]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Avatar)

    def latest_for_player(self, player_id: int) -> Avatar | None:
        stmt = (
            select(Avatar)
            .where(Avatar.player_id == player_id)
            .order_by(Avatar.download_id.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

