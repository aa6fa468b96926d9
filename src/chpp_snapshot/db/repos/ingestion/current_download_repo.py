from __future__ import annotations

from sqlalchemy.orm import Session

from chpp_snapshot.db.models.ingestion.current_download import CURRENT_POINTER_ID, CurrentDownload
from chpp_snapshot.db.repos.base import BaseRepository


class CurrentDownloadRepository(BaseRepository[CurrentDownload]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=CurrentDownload)

    def pointer(self) -> CurrentDownload | None:
        return self.get(CURRENT_POINTER_ID)
