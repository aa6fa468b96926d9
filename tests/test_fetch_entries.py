from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

import chpp_snapshot.db.models  # noqa: F401
from chpp_snapshot.core.errors import ConcurrencyError, IntegrityError
from chpp_snapshot.db import Base, DatabaseConfig, create_db_engine, create_session_factory
from chpp_snapshot.db.enums import DownloadStatus, EntryStatus
from chpp_snapshot.ingestion.providers.base.types import EndpointPayload, FetchErr, FetchOk
from chpp_snapshot.sync.entries import FetchEntryTracker
from chpp_snapshot.sync.epochs import EpochManager
from chpp_snapshot.sync.promotion import PromotionStep

OK = FetchOk(EndpointPayload())


def _make_session() -> Session:
    engine = create_db_engine(DatabaseConfig(database_url="sqlite+pysqlite:///:memory:"))
    Base.metadata.create_all(engine)
    return create_session_factory(engine)()


def test_success_sets_fetched_date_and_clears_error() -> None:
    session = _make_session()
    download_id = EpochManager(session).begin_epoch()
    tracker = FetchEntryTracker(session, max_retries=3)

    tracker.record_attempt(download_id, "worlddetails", "1.9", FetchErr("timeout"))
    entry = tracker.record_attempt(download_id, "worlddetails", "1.9", OK)

    assert entry.status == EntryStatus.SUCCEEDED
    assert entry.fetched_date is not None
    assert entry.error_message is None
    assert entry.retry_count == 1


def test_teams_fails_twice_then_succeeds_on_third_attempt() -> None:
    session = _make_session()
    download_id = EpochManager(session).begin_epoch()
    tracker = FetchEntryTracker(session)

    tracker.record_attempt(download_id, "teams", "2", FetchErr("HTTP 503"), max_retries=3)
    assert tracker.next_retryable(download_id, 3) == {"teams"}
    tracker.record_attempt(download_id, "teams", "2", FetchErr("HTTP 503"), max_retries=3)
    assert tracker.next_retryable(download_id, 3) == {"teams"}
    entry = tracker.record_attempt(download_id, "teams", "2", OK, max_retries=3)

    assert entry.status == EntryStatus.SUCCEEDED
    assert entry.retry_count == 2
    assert tracker.next_retryable(download_id, 3) == set()


def test_exhausted_entry_is_not_retryable_but_still_listed() -> None:
    session = _make_session()
    download_id = EpochManager(session).begin_epoch()
    tracker = FetchEntryTracker(session)

    for _ in range(3):
        tracker.record_attempt(download_id, "players", "2.4", FetchErr("boom"), max_retries=3)

    assert tracker.next_retryable(download_id, 3) == set()
    entries = tracker.list_entries(download_id)
    assert [(e.endpoint, e.status, e.retry_count) for e in entries] == [
        ("players", EntryStatus.EXHAUSTED, 3)
    ]
    assert entries[0].error_message == "boom"
    assert tracker.exhausted_endpoints(download_id) == {"players"}


def test_next_retryable_exhausts_failed_entries_at_the_ceiling() -> None:
    session = _make_session()
    download_id = EpochManager(session).begin_epoch()
    tracker = FetchEntryTracker(session)

    tracker.record_attempt(download_id, "cup", "1", FetchErr("x"), max_retries=10)
    tracker.record_attempt(download_id, "cup", "1", FetchErr("x"), max_retries=10)
    tracker.record_attempt(download_id, "league", "1", FetchErr("x"), max_retries=10)

    assert tracker.next_retryable(download_id, 2) == {"league"}
    statuses = {e.endpoint: e.status for e in tracker.list_entries(download_id)}
    assert statuses == {"cup": EntryStatus.EXHAUSTED, "league": EntryStatus.FAILED}


def test_entries_are_independent() -> None:
    session = _make_session()
    download_id = EpochManager(session).begin_epoch()
    tracker = FetchEntryTracker(session, max_retries=1)

    tracker.record_attempt(download_id, "worlddetails", "1.9", FetchErr("down"))
    tracker.record_attempt(download_id, "teamdetails", "3.7", OK)

    statuses = {e.endpoint: e.status for e in tracker.list_entries(download_id)}
    assert statuses == {"worlddetails": EntryStatus.EXHAUSTED, "teamdetails": EntryStatus.SUCCEEDED}


def test_register_pending_is_idempotent() -> None:
    session = _make_session()
    download_id = EpochManager(session).begin_epoch()
    tracker = FetchEntryTracker(session)

    first = tracker.register_pending(download_id, "managercompendium", "1.5", user_id=9)
    second = tracker.register_pending(download_id, "managercompendium", "1.5", user_id=9)

    assert first.id == second.id
    assert first.status == EntryStatus.PENDING
    assert first.user_id == 9


def test_epoch_state_open_complete_partial() -> None:
    session = _make_session()
    epochs = EpochManager(session)
    tracker = FetchEntryTracker(session, max_retries=1)
    required = ["worlddetails", "teamdetails"]

    empty = epochs.begin_epoch()
    assert tracker.epoch_state(empty, required) == DownloadStatus.OPEN

    missing = epochs.begin_epoch()
    tracker.record_attempt(missing, "worlddetails", "1.9", OK)
    assert tracker.epoch_state(missing, required) == DownloadStatus.OPEN

    pending = epochs.begin_epoch()
    tracker.record_attempt(pending, "worlddetails", "1.9", OK)
    tracker.register_pending(pending, "teamdetails", "3.7")
    assert tracker.epoch_state(pending, required) == DownloadStatus.OPEN

    complete = epochs.begin_epoch()
    tracker.record_attempt(complete, "worlddetails", "1.9", OK)
    tracker.record_attempt(complete, "teamdetails", "3.7", OK)
    tracker.record_attempt(complete, "avatars", "1.1", FetchErr("optional"))
    assert tracker.epoch_state(complete, required) == DownloadStatus.COMPLETE

    partial = epochs.begin_epoch()
    tracker.record_attempt(partial, "worlddetails", "1.9", OK)
    tracker.record_attempt(partial, "teamdetails", "3.7", FetchErr("gone"))
    assert tracker.epoch_state(partial, required) == DownloadStatus.PARTIAL


def test_entries_of_a_promoted_download_are_frozen() -> None:
    session = _make_session()
    download_id = EpochManager(session).begin_epoch()
    tracker = FetchEntryTracker(session, max_retries=3)
    tracker.record_attempt(download_id, "worlddetails", "1.9", OK)
    step = PromotionStep(session, tracker=tracker)
    step.settle(download_id)
    step.promote(download_id)

    with pytest.raises(ConcurrencyError):
        tracker.record_attempt(download_id, "worlddetails", "1.9", FetchErr("late"))
    with pytest.raises(ConcurrencyError):
        tracker.register_pending(download_id, "teamdetails", "3.7")

    entries = tracker.list_entries(download_id)
    assert [(e.endpoint, e.status, e.retry_count) for e in entries] == [
        ("worlddetails", EntryStatus.SUCCEEDED, 0)
    ]
    assert tracker.epoch_state(download_id) == DownloadStatus.COMPLETE


def test_entries_of_a_retired_download_are_frozen() -> None:
    session = _make_session()
    epochs = EpochManager(session)
    download_id = epochs.begin_epoch()
    tracker = FetchEntryTracker(session, max_retries=1, epochs=epochs)
    tracker.record_attempt(download_id, "worlddetails", "1.9", FetchErr("down"))
    epochs.discard_epoch(download_id)

    with pytest.raises(ConcurrencyError):
        tracker.record_attempt(download_id, "worlddetails", "1.9", OK)


def test_attempt_for_unknown_download_is_an_integrity_error() -> None:
    session = _make_session()

    with pytest.raises(IntegrityError):
        FetchEntryTracker(session).record_attempt(404, "worlddetails", "1.9", OK)
