from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session

from chpp_snapshot.core.errors import ConcurrencyError, IntegrityError
from chpp_snapshot.db.enums import DownloadStatus
from chpp_snapshot.db.models.ingestion.download import Download
from chpp_snapshot.db.repos.ingestion.current_download_repo import CurrentDownloadRepository
from chpp_snapshot.db.repos.ingestion.download_repo import DownloadRepository
from chpp_snapshot.sync.locks import EpochWriterRegistry, epoch_writers

logger = logging.getLogger(__name__)

# States a writer may still add rows to.
WRITABLE_STATUSES = (DownloadStatus.OPEN, DownloadStatus.COMPLETE, DownloadStatus.PARTIAL)


class EpochManager:
    """Creates, inspects and retires downloads (epochs)."""

    def __init__(self, session: Session, *, writers: EpochWriterRegistry | None = None) -> None:
        self.session = session
        self.writers = writers if writers is not None else epoch_writers
        self.downloads = DownloadRepository(session)
        self.pointer = CurrentDownloadRepository(session)

    def begin_epoch(self) -> int:
        download = self.downloads.add(Download(status=DownloadStatus.OPEN.value), flush=True)
        download_id = download.id
        self.session.commit()
        logger.info("Opened download %s", download_id)
        return download_id

    def get_epoch(self, download_id: int) -> Download:
        download = self.downloads.get(download_id)
        if download is None:
            raise IntegrityError(f"download {download_id} does not exist")
        return download

    def require_writable(self, download_id: int) -> Download:
        download = self.get_epoch(download_id)
        if download.status not in WRITABLE_STATUSES:
            raise ConcurrencyError(
                f"download {download_id} is {download.status} and no longer accepts writes"
            )
        return download

    def list_epochs(self, *, status: DownloadStatus | None = None) -> list[int]:
        return self.downloads.ids(status=status)

    def current_epoch(self) -> int | None:
        ptr = self.pointer.pointer()
        return None if ptr is None else ptr.download_id

    def set_status(
        self, download_id: int, status: DownloadStatus, *, finished: bool = False
    ) -> Download:
        download = self.get_epoch(download_id)
        download.status = DownloadStatus(status).value
        if finished and download.finished_at is None:
            download.finished_at = datetime.now(tz=UTC)
        self.session.flush()
        return download

    def discard_epoch(self, download_id: int) -> None:
        """Mark an epoch as retired without deleting it (abandoned or rejected runs)."""

        download = self.get_epoch(download_id)
        if self.current_epoch() == download_id:
            raise ConcurrencyError(f"download {download_id} is current and cannot be discarded")
        if self.writers.is_active(download_id):
            raise ConcurrencyError(f"download {download_id} has an active writer")
        if download.status == DownloadStatus.RETIRED:
            return

        self.set_status(download_id, DownloadStatus.RETIRED, finished=True)
        self.session.commit()
        logger.info("Discarded download %s", download_id)

    def retire_epoch(self, download_id: int) -> None:
        """Delete a retired epoch; the database cascades the delete to every scoped row."""

        download = self.get_epoch(download_id)
        if download.status != DownloadStatus.RETIRED:
            raise ConcurrencyError(
                f"download {download_id} is {download.status}; "
                "only retired downloads can be deleted"
            )
        if self.current_epoch() == download_id:
            raise ConcurrencyError(f"download {download_id} is current and cannot be deleted")
        if self.writers.is_active(download_id):
            raise ConcurrencyError(f"download {download_id} has an active writer")

        try:
            self.downloads.delete(download, flush=True)
            self.session.commit()
        except sa_exc.IntegrityError as e:
            self.session.rollback()
            raise IntegrityError(f"failed to delete download {download_id}: {e.orig}") from e

        logger.info("Deleted download %s and its scoped rows", download_id)

    def abandoned_epochs(self, older_than: timedelta) -> list[int]:
        cutoff = datetime.now(tz=UTC) - older_than
        return [
            d.id
            for d in self.downloads.open_started_before(cutoff)
            if not self.writers.is_active(d.id)
        ]
