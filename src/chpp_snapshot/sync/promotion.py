from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from chpp_snapshot.core.config import settings
from chpp_snapshot.core.errors import ConcurrencyError, PromotionError
from chpp_snapshot.db.enums import DownloadStatus
from chpp_snapshot.db.models.ingestion.current_download import CURRENT_POINTER_ID, CurrentDownload
from chpp_snapshot.db.repos.ingestion.current_download_repo import CurrentDownloadRepository
from chpp_snapshot.sync.entries import FetchEntryTracker
from chpp_snapshot.sync.epochs import WRITABLE_STATUSES, EpochManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromotionPolicy:
    """Which exhausted endpoints a partial download may carry and still be promoted."""

    allow_partial: bool = False
    tolerated_endpoints: frozenset[str] = field(default_factory=frozenset)

    def permits(self, exhausted: Iterable[str]) -> bool:
        if self.allow_partial:
            return True
        return set(exhausted) <= set(self.tolerated_endpoints)

    @classmethod
    def from_settings(cls) -> PromotionPolicy:
        return cls(allow_partial=settings.allow_partial_promotion)


@dataclass(frozen=True)
class PromotionResult:
    download_id: int
    superseded_id: int | None
    retired_ids: list[int]


class PromotionStep:
    """Open -> Complete | Partial -> Promoted | Retired."""

    def __init__(
        self,
        session: Session,
        *,
        epochs: EpochManager | None = None,
        tracker: FetchEntryTracker | None = None,
    ) -> None:
        self.session = session
        self.epochs = epochs if epochs is not None else EpochManager(session)
        if tracker is None:
            tracker = FetchEntryTracker(session, epochs=self.epochs)
        self.tracker = tracker
        self.pointer = CurrentDownloadRepository(session)

    def settle(self, download_id: int, required: Iterable[str] | None = None) -> DownloadStatus:
        """Store `complete`/`partial` from the entries. An epoch with work left stays open."""

        download = self.epochs.get_epoch(download_id)
        if download.status not in WRITABLE_STATUSES:
            raise PromotionError(
                f"download {download_id} is {download.status} and cannot be settled"
            )

        state = self.tracker.epoch_state(download_id, required)
        if state == DownloadStatus.OPEN:
            if download.status != DownloadStatus.OPEN:
                self.epochs.set_status(download_id, DownloadStatus.OPEN)
                self.session.commit()
            return state

        self.epochs.set_status(download_id, state, finished=True)
        self.session.commit()
        logger.info("Download %s settled as %s", download_id, state.value)
        return state

    def promote(
        self,
        download_id: int,
        policy: PromotionPolicy | None = None,
        *,
        keep_previous: int | None = None,
    ) -> PromotionResult:
        policy = policy if policy is not None else PromotionPolicy.from_settings()
        download = self.epochs.get_epoch(download_id)

        if self.epochs.writers.is_active(download_id):
            raise ConcurrencyError(f"download {download_id} has an active writer")

        status = download.status
        if status == DownloadStatus.PROMOTED:
            raise PromotionError(f"download {download_id} is already promoted")
        if status == DownloadStatus.OPEN:
            raise PromotionError(f"download {download_id} is still open")
        if status == DownloadStatus.RETIRED:
            raise PromotionError(f"download {download_id} is retired")
        if status == DownloadStatus.PARTIAL:
            exhausted = self.tracker.exhausted_endpoints(download_id)
            if not policy.permits(exhausted):
                raise PromotionError(
                    f"download {download_id} is partial; exhausted endpoints "
                    f"{sorted(exhausted)} are not tolerated"
                )

        now = datetime.now(tz=UTC)
        ptr = self.pointer.pointer()
        superseded_id = None if ptr is None else ptr.download_id

        if ptr is None:
            self.pointer.add(
                CurrentDownload(id=CURRENT_POINTER_ID, download_id=download_id, promoted_at=now),
                flush=False,
            )
        else:
            ptr.download_id = download_id
            ptr.promoted_at = now

        self.epochs.set_status(download_id, DownloadStatus.PROMOTED, finished=True)
        if superseded_id is not None and superseded_id != download_id:
            self.epochs.set_status(superseded_id, DownloadStatus.RETIRED, finished=True)
        superseded_settled = self._retire_settled_before(download_id)
        self.session.commit()

        logger.info(
            "Promoted download %s (superseded %s)",
            download_id,
            superseded_id if superseded_id is not None else "-",
        )
        if superseded_settled:
            logger.info("Retired never-promoted downloads %s", superseded_settled)

        retired_ids = self.apply_retention(keep_previous)
        return PromotionResult(
            download_id=download_id, superseded_id=superseded_id, retired_ids=retired_ids
        )

    def _retire_settled_before(self, download_id: int) -> list[int]:
        """Older settled downloads that were never promoted are superseded too."""

        retired: list[int] = []
        for status in (DownloadStatus.COMPLETE, DownloadStatus.PARTIAL):
            for other in self.epochs.list_epochs(status=status):
                if other >= download_id or self.epochs.writers.is_active(other):
                    continue
                self.epochs.set_status(other, DownloadStatus.RETIRED, finished=True)
                retired.append(other)
        return sorted(retired)

    def apply_retention(self, keep_previous: int | None = None) -> list[int]:
        """Delete the oldest retired downloads, keeping the newest `keep_previous` of them."""

        keep = settings.retention_keep_previous if keep_previous is None else keep_previous
        if keep < 0:
            raise ValueError("keep_previous must be >= 0")

        current = self.epochs.current_epoch()
        retired = [
            d
            for d in self.epochs.list_epochs(status=DownloadStatus.RETIRED)
            if d != current and not self.epochs.writers.is_active(d)
        ]
        doomed = retired[: max(len(retired) - keep, 0)]

        for download_id in doomed:
            self.epochs.retire_epoch(download_id)

        if doomed:
            logger.info("Retention removed downloads %s", doomed)
        return doomed

    def reap_abandoned(self, older_than: timedelta | None = None) -> list[int]:
        """Discard and delete open downloads nobody is writing to any more."""

        if older_than is None:
            older_than = timedelta(hours=settings.abandoned_after_hours)
        reaped: list[int] = []
        for download_id in self.epochs.abandoned_epochs(older_than):
            self.epochs.discard_epoch(download_id)
            self.epochs.retire_epoch(download_id)
            reaped.append(download_id)

        if reaped:
            logger.info("Reaped abandoned downloads %s", reaped)
        return reaped
