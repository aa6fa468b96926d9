from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from chpp_snapshot.db.models.ingestion.download_entry import DownloadEntry
from chpp_snapshot.db.repos.base import BaseRepository


class DownloadEntryRepository(BaseRepository[DownloadEntry]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=DownloadEntry)

    def find(self, download_id: int, endpoint: str, version: str) -> DownloadEntry | None:
        return self.first_where(
            DownloadEntry.download_id == download_id,
            DownloadEntry.endpoint == endpoint,
            DownloadEntry.version == version,
        )

    def for_download(self, download_id: int) -> list[DownloadEntry]:
        stmt = (
            select(DownloadEntry)
            .where(DownloadEntry.download_id == download_id)
            .order_by(DownloadEntry.id)
        )
        return list(self.session.execute(stmt).scalars().all())
