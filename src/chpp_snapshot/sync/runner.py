from __future__ import annotations

import dataclasses
import hashlib
import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from chpp_snapshot.core.config import settings
from chpp_snapshot.core.errors import (
    ConflictError,
    FetchError,
    IntegrityError,
    PromotionError,
    ValidationError,
)
from chpp_snapshot.db.enums import DownloadStatus, EntityKind, EntryStatus
from chpp_snapshot.ingestion.avatars import AvatarFetcher
from chpp_snapshot.ingestion.providers.base.adapter import SnapshotProvider
from chpp_snapshot.ingestion.providers.base.errors import ProviderError
from chpp_snapshot.ingestion.providers.base.types import (
    EndpointPayload,
    EndpointSpec,
    FetchErr,
    FetchOk,
    FetchResult,
)
from chpp_snapshot.sync.entries import FetchEntryTracker
from chpp_snapshot.sync.epochs import EpochManager
from chpp_snapshot.sync.kinds import REFERENCE_WRITE_ORDER
from chpp_snapshot.sync.locks import EpochWriterRegistry, KeyedLocks, epoch_writers
from chpp_snapshot.sync.promotion import PromotionPolicy, PromotionStep
from chpp_snapshot.sync.writer import SnapshotWriter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptOutcome:
    endpoint: str
    version: str
    attempt: int
    succeeded: bool
    error: str | None = None


@dataclass(frozen=True)
class RunResult:
    download_id: int
    status: DownloadStatus
    promoted: bool
    attempts: list[AttemptOutcome]
    exhausted_endpoints: list[str]
    retired_ids: list[int]
    failure_reasons: dict[str, int]


def _format_failure_reason(exc: BaseException, *, max_len: int = 300) -> str:
    msg = str(exc).strip() or exc.__class__.__name__
    reason = f"{exc.__class__.__name__}: {msg}"
    if len(reason) > max_len:
        return f"{reason[: max_len - 3]}..."
    return reason


def _ordered_reference(payload: EndpointPayload) -> list[tuple[EntityKind | str, list[Any]]]:
    by_kind: dict[str, tuple[EntityKind | str, list[Any]]] = {}
    for kind, rows in payload.reference.items():
        by_kind[str(kind)] = (kind, list(rows))

    ordered = [by_kind.pop(k.value) for k in REFERENCE_WRITE_ORDER if k.value in by_kind]
    # Anything left is not a reference kind; the writer rejects it.
    return ordered + list(by_kind.values())


class DownloadRunner:
    """
    Drives one download: open (or resume) an epoch, fetch every endpoint, retry
    failures with exponential backoff, persist payloads, settle, and promote.

    Fetching runs on a bounded thread pool; all database work stays on the
    calling thread.
    """

    def __init__(
        self,
        session: Session,
        provider: SnapshotProvider,
        *,
        max_retries: int | None = None,
        workers: int | None = None,
        initial_backoff_s: float | None = None,
        max_backoff_s: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
        avatar_fetcher: AvatarFetcher | None = None,
        writers: EpochWriterRegistry | None = None,
        locks: KeyedLocks | None = None,
    ) -> None:
        self.session = session
        self.provider = provider
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.workers = settings.fetch_workers if workers is None else workers
        self.initial_backoff_s = (
            settings.retry_initial_backoff_s if initial_backoff_s is None else initial_backoff_s
        )
        self.max_backoff_s = (
            settings.retry_max_backoff_s if max_backoff_s is None else max_backoff_s
        )
        self.sleep = sleep
        self.avatar_fetcher = avatar_fetcher

        self.writers = writers if writers is not None else epoch_writers
        self.epochs = EpochManager(session, writers=self.writers)
        self.tracker = FetchEntryTracker(
            session, max_retries=self.max_retries, epochs=self.epochs
        )
        self.writer = SnapshotWriter(session, locks=locks, epochs=self.epochs)
        self.promotion = PromotionStep(session, epochs=self.epochs, tracker=self.tracker)

    # ----- fetching (worker threads) -----

    def _fetch_one(self, spec: EndpointSpec) -> FetchResult:
        try:
            result = self.provider.fetch(spec)
        except (ProviderError, FetchError) as e:
            return FetchErr(_format_failure_reason(e))

        if not isinstance(result, FetchOk) or self.avatar_fetcher is None:
            return result
        payload = result.payload
        if not payload.avatar_urls and not payload.avatar_layers:
            return result

        avatars = dict(payload.avatars)
        for player_id, layers in payload.avatar_layers.items():
            if player_id not in avatars:
                blob = self.avatar_fetcher.composite(layers)
                if blob is not None:
                    avatars[player_id] = blob
        for player_id, url in payload.avatar_urls.items():
            if player_id not in avatars:
                blob = self.avatar_fetcher.fetch(url)
                if blob is not None:
                    avatars[player_id] = blob
        return FetchOk(dataclasses.replace(payload, avatars=avatars))

    def _fetch_all(self, todo: list[EndpointSpec]) -> dict[EndpointSpec, FetchResult]:
        max_workers = max(1, min(self.workers, len(todo)))
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="chpp-fetch") as pool:
            futures = {spec: pool.submit(self._fetch_one, spec) for spec in todo}
            return {spec: fut.result() for spec, fut in futures.items()}

    # ----- persisting (runner thread) -----

    def _store_avatar(self, download_id: int, player_id: int, blob: bytes) -> None:
        latest = self.writer.latest_attachment(player_id)
        if (
            latest is not None
            and latest.download_id != download_id
            and latest.content_sha256 == hashlib.sha256(blob).hexdigest()
        ):
            return
        self.writer.write_attachment(player_id, download_id, blob)

    def _persist(self, download_id: int, payload: EndpointPayload) -> FetchResult:
        try:
            for kind, rows in _ordered_reference(payload):
                if not rows:
                    continue
                ids = [r.get("id") for r in rows]
                if all(isinstance(i, int) for i in ids):
                    present = self.writer.existing_reference_ids(download_id, kind, ids)
                    if present and present == set(ids):
                        # Written by an earlier attempt of this download.
                        logger.debug("%s already written for download %s", kind, download_id)
                        continue
                self.writer.write_reference_batch(download_id, kind, rows)

            for team in payload.teams:
                attrs = self.writer.with_reference_names(download_id, team)
                self.writer.upsert_singleton(EntityKind.TEAM, team.get("id"), attrs)

            for player in payload.players:
                self.writer.upsert_singleton(EntityKind.PLAYER, player.get("id"), player)

            for player_id, blob in payload.avatars.items():
                self._store_avatar(download_id, player_id, blob)
        except (ValidationError, IntegrityError, ConflictError) as e:
            if not self.session.is_active:
                self.session.rollback()
            return FetchErr(_format_failure_reason(e))

        return FetchOk(payload)

    # ----- orchestration -----

    def _initial_todo(self, download_id: int, endpoints: list[EndpointSpec]) -> list[EndpointSpec]:
        retryable = self.tracker.next_retryable(download_id, self.max_retries)
        pending = {
            e.endpoint
            for e in self.tracker.list_entries(download_id)
            if e.status == EntryStatus.PENDING
        }
        return [s for s in endpoints if s.name in pending or s.name in retryable]

    def run(
        self,
        *,
        resume: int | None = None,
        policy: PromotionPolicy | None = None,
        promote: bool = True,
        keep_previous: int | None = None,
    ) -> RunResult:
        endpoints = list(self.provider.endpoints())
        required = [e.name for e in endpoints if e.required]

        if resume is None:
            download_id = self.epochs.begin_epoch()
        else:
            download_id = self.epochs.require_writable(resume).id
            logger.info(
                "Resuming download %s from %s", download_id, self.provider.provider_key
            )

        attempts: list[AttemptOutcome] = []
        failure_reasons: dict[str, int] = {}

        with self.writers.writing(download_id):
            for spec in endpoints:
                self.tracker.register_pending(
                    download_id, spec.name, spec.version, user_id=spec.user_id
                )

            todo = self._initial_todo(download_id, endpoints)
            backoff = self.initial_backoff_s
            while todo:
                results = self._fetch_all(todo)
                for spec in todo:
                    outcome = results[spec]
                    if isinstance(outcome, FetchOk):
                        outcome = self._persist(download_id, outcome.payload)

                    entry = self.tracker.record_attempt(
                        download_id,
                        spec.name,
                        spec.version,
                        outcome,
                        user_id=spec.user_id,
                        max_retries=self.max_retries,
                    )

                    if isinstance(outcome, FetchErr):
                        failure_reasons[outcome.cause] = failure_reasons.get(outcome.cause, 0) + 1
                        logger.warning(
                            "%s %s v%s failed (attempt %s): %s",
                            self.provider.provider_key,
                            spec.name,
                            spec.version,
                            entry.retry_count,
                            outcome.cause,
                        )
                        attempts.append(
                            AttemptOutcome(
                                spec.name, spec.version, entry.retry_count, False, outcome.cause
                            )
                        )
                    else:
                        attempts.append(
                            AttemptOutcome(spec.name, spec.version, entry.retry_count + 1, True)
                        )

                retry_names = self.tracker.next_retryable(download_id, self.max_retries)
                todo = [s for s in endpoints if s.name in retry_names]
                if todo:
                    logger.info(
                        "Retrying %s endpoint(s) for download %s in %.1fs",
                        len(todo),
                        download_id,
                        backoff,
                    )
                    self.sleep(backoff)
                    backoff = min(backoff * 2, self.max_backoff_s)

        status = self.promotion.settle(download_id, required)
        exhausted = sorted(self.tracker.exhausted_endpoints(download_id))

        promoted = False
        retired_ids: list[int] = []
        if promote and status in (DownloadStatus.COMPLETE, DownloadStatus.PARTIAL):
            try:
                result = self.promotion.promote(download_id, policy, keep_previous=keep_previous)
            except PromotionError as e:
                logger.warning("Download %s not promoted: %s", download_id, e)
            else:
                promoted = True
                retired_ids = result.retired_ids
                status = DownloadStatus.PROMOTED

        logger.info(
            "Download %s from %s finished: status=%s attempts=%s exhausted=%s",
            download_id,
            self.provider.provider_key,
            status.value,
            len(attempts),
            exhausted,
        )
        return RunResult(
            download_id=download_id,
            status=status,
            promoted=promoted,
            attempts=attempts,
            exhausted_endpoints=exhausted,
            retired_ids=retired_ids,
            failure_reasons=failure_reasons,
        )
