from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from chpp_snapshot.db.models.ingestion.download import Download
from chpp_snapshot.db.repos.base import BaseRepository


class DownloadRepository(BaseRepository[Download]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=Download)

    def ids(self, *, status: str | None = None) -> list[int]:
        stmt = select(Download.id).order_by(Download.id)
        if status is not None:
            stmt = stmt.where(Download.status == str(status))
        return list(self.session.execute(stmt).scalars().all())

    def open_started_before(self, cutoff: datetime) -> list[Download]:
        stmt = (
            select(Download)
            .where(Download.status == "open", Download.started_at < cutoff)
            .order_by(Download.id)
        )
        return list(self.session.execute(stmt).scalars().all())
