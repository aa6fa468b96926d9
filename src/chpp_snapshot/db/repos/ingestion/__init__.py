from __future__ import annotations

from chpp_snapshot.db.repos.ingestion.current_download_repo import CurrentDownloadRepository
from chpp_snapshot.db.repos.ingestion.download_entry_repo import DownloadEntryRepository
from chpp_snapshot.db.repos.ingestion.download_repo import DownloadRepository

__all__ = [
    "CurrentDownloadRepository",
    "DownloadEntryRepository",
    "DownloadRepository",
]
