from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from chpp_snapshot.core.config import settings
from chpp_snapshot.db.enums import DownloadStatus, EntryStatus
from chpp_snapshot.db.models.ingestion.download_entry import DownloadEntry
from chpp_snapshot.db.repos.ingestion.download_entry_repo import DownloadEntryRepository
from chpp_snapshot.ingestion.providers.base.types import FetchErr, FetchOk, FetchResult
from chpp_snapshot.sync.epochs import EpochManager

logger = logging.getLogger(__name__)


class FetchEntryTracker:
    """Records one `DownloadEntry` per (endpoint, version) attempted within a download.

    Entries are independent: a failing endpoint never blocks the others, and
    the tracker never raises for fetch failures; it only records them. Entries of a
    promoted or retired download are frozen (`ConcurrencyError`).
    """

    def __init__(
        self,
        session: Session,
        *,
        max_retries: int | None = None,
        epochs: EpochManager | None = None,
    ) -> None:
        self.session = session
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.epochs = epochs if epochs is not None else EpochManager(session)
        self.entries = DownloadEntryRepository(session)

    def register_pending(
        self,
        download_id: int,
        endpoint: str,
        version: str,
        *,
        user_id: int | None = None,
    ) -> DownloadEntry:
        entry = self.entries.find(download_id, endpoint, version)
        if entry is None:
            self.epochs.require_writable(download_id)
            entry = self.entries.add(
                DownloadEntry(
                    download_id=download_id,
                    endpoint=endpoint,
                    version=version,
                    user_id=user_id,
                    status=EntryStatus.PENDING.value,
                    retry_count=0,
                ),
                flush=True,
            )
            self.session.commit()
        return entry

    def record_attempt(
        self,
        download_id: int,
        endpoint: str,
        version: str,
        outcome: FetchResult,
        *,
        user_id: int | None = None,
        max_retries: int | None = None,
    ) -> DownloadEntry:
        limit = self.max_retries if max_retries is None else max_retries
        self.epochs.require_writable(download_id)

        entry = self.entries.find(download_id, endpoint, version)
        if entry is None:
            entry = self.entries.add(
                DownloadEntry(
                    download_id=download_id,
                    endpoint=endpoint,
                    version=version,
                    user_id=user_id,
                    status=EntryStatus.PENDING.value,
                    retry_count=0,
                ),
                flush=False,
            )
        elif user_id is not None:
            entry.user_id = user_id

        if isinstance(outcome, FetchOk):
            entry.status = EntryStatus.SUCCEEDED.value
            entry.fetched_date = datetime.now(tz=UTC)
            entry.error_message = None
        elif isinstance(outcome, FetchErr):
            entry.retry_count = (entry.retry_count or 0) + 1
            entry.error_message = outcome.cause
            if entry.retry_count >= limit:
                entry.status = EntryStatus.EXHAUSTED.value
                logger.warning(
                    "%s v%s exhausted after %s attempts: %s",
                    endpoint,
                    version,
                    entry.retry_count,
                    outcome.cause,
                )
            else:
                entry.status = EntryStatus.FAILED.value
        else:
            raise TypeError(f"Expected FetchOk or FetchErr, got: {type(outcome)}")

        self.session.flush()
        self.session.commit()
        return entry

    def retryable_entries(
        self, download_id: int, max_retries: int | None = None
    ) -> list[DownloadEntry]:
        """Failed entries still under the retry ceiling. Entries at the ceiling become exhausted."""

        limit = self.max_retries if max_retries is None else max_retries

        retryable: list[DownloadEntry] = []
        at_ceiling: list[DownloadEntry] = []
        for entry in self.entries.for_download(download_id):
            if entry.status != EntryStatus.FAILED:
                continue
            if entry.retry_count < limit:
                retryable.append(entry)
            else:
                at_ceiling.append(entry)

        if at_ceiling:
            self.epochs.require_writable(download_id)
            for entry in at_ceiling:
                entry.status = EntryStatus.EXHAUSTED.value
            self.session.flush()
            self.session.commit()
        return retryable

    def next_retryable(self, download_id: int, max_retries: int | None = None) -> set[str]:
        return {e.endpoint for e in self.retryable_entries(download_id, max_retries)}

    def list_entries(self, download_id: int) -> list[DownloadEntry]:
        return self.entries.for_download(download_id)

    def exhausted_endpoints(self, download_id: int) -> set[str]:
        return {
            e.endpoint
            for e in self.entries.for_download(download_id)
            if e.status == EntryStatus.EXHAUSTED
        }

    def epoch_state(
        self, download_id: int, required: Iterable[str] | None = None
    ) -> DownloadStatus:
        """
        Classify a download from its entries.

        - COMPLETE: every required endpoint has a succeeded entry.
        - OPEN: some required endpoint is missing, pending, or still retryable.
        - PARTIAL: nothing left to retry, but a required endpoint exhausted its retries.

        When `required` is None every recorded endpoint is required.
        """

        by_endpoint: dict[str, list[DownloadEntry]] = defaultdict(list)
        for entry in self.entries.for_download(download_id):
            by_endpoint[entry.endpoint].append(entry)

        required_names = set(by_endpoint) if required is None else set(required)
        if not required_names:
            return DownloadStatus.OPEN

        any_open = False
        any_exhausted = False
        for name in required_names:
            entries = by_endpoint.get(name, [])
            if not entries:
                any_open = True
            elif any(e.status == EntryStatus.SUCCEEDED for e in entries):
                continue
            elif all(e.status == EntryStatus.EXHAUSTED for e in entries):
                any_exhausted = True
            else:
                any_open = True

        if any_open:
            return DownloadStatus.OPEN
        if any_exhausted:
            return DownloadStatus.PARTIAL
        return DownloadStatus.COMPLETE
