from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from pathlib import Path

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

import chpp_snapshot.db.models  # noqa: F401
from chpp_snapshot.core.errors import (
    ConcurrencyError,
    ConflictError,
    IntegrityError,
    ValidationError,
)
from chpp_snapshot.db import Base, DatabaseConfig, create_db_engine, create_session_factory
from chpp_snapshot.db.enums import DownloadStatus, EntityKind
from chpp_snapshot.db.models import Avatar, League, Player, Team
from chpp_snapshot.db.repos.reference import ReferenceRepository
from chpp_snapshot.sync.epochs import EpochManager
from chpp_snapshot.sync.locks import KeyedLocks
from chpp_snapshot.sync.writer import SnapshotWriter


def _make_session() -> Session:
    engine = create_db_engine(DatabaseConfig(database_url="sqlite+pysqlite:///:memory:"))
    Base.metadata.create_all(engine)
    return create_session_factory(engine)()


def _leagues(session: Session, download_id: int) -> list[League]:
    return ReferenceRepository(session, League).for_download(download_id)


def test_write_reference_batch_inserts_rows_under_download() -> None:
    session = _make_session()
    download_id = EpochManager(session).begin_epoch()

    written = SnapshotWriter(session).write_reference_batch(
        download_id,
        EntityKind.LEAGUE,
        [
            {"id": 1, "name": "Sverige", "country_id": 1, "season": 91},
            {"id": 2, "name": "England", "country_id": 2},
        ],
    )

    assert written == 2
    rows = _leagues(session, download_id)
    assert [(r.id, r.name, r.download_id) for r in rows] == [
        (1, "Sverige", download_id),
        (2, "England", download_id),
    ]
    assert rows[0].season == 91


def test_same_natural_id_may_differ_across_downloads() -> None:
    session = _make_session()
    epochs = EpochManager(session)
    writer = SnapshotWriter(session)
    first = epochs.begin_epoch()
    second = epochs.begin_epoch()

    writer.write_reference_batch(first, "league", [{"id": 1, "name": "Allsvenskan", "season": 90}])
    writer.write_reference_batch(second, "league", [{"id": 1, "name": "Allsvenskan", "season": 91}])

    assert [r.season for r in _leagues(session, first)] == [90]
    assert [r.season for r in _leagues(session, second)] == [91]


def test_duplicate_id_in_batch_rejects_whole_batch() -> None:
    session = _make_session()
    download_id = EpochManager(session).begin_epoch()

    with pytest.raises(ValidationError):
        SnapshotWriter(session).write_reference_batch(
            download_id,
            EntityKind.LEAGUE,
            [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}, {"id": 1, "name": "C"}],
        )

    assert _leagues(session, download_id) == []


def test_natural_id_already_written_in_download_is_rejected() -> None:
    session = _make_session()
    download_id = EpochManager(session).begin_epoch()
    writer = SnapshotWriter(session)
    writer.write_reference_batch(download_id, EntityKind.LEAGUE, [{"id": 1, "name": "A"}])

    with pytest.raises(ValidationError):
        writer.write_reference_batch(
            download_id, EntityKind.LEAGUE, [{"id": 2, "name": "B"}, {"id": 1, "name": "A2"}]
        )

    assert [r.name for r in _leagues(session, download_id)] == ["A"]


@pytest.mark.parametrize(
    "row",
    [
        {"id": 1, "name": "A", "nope": 1},
        {"id": 1},
        {"name": "no id"},
        {"id": "1", "name": "string id"},
        {"id": 1, "name": "A", "download_id": 999},
    ],
)
def test_malformed_rows_are_rejected(row: dict) -> None:
    session = _make_session()
    download_id = EpochManager(session).begin_epoch()

    with pytest.raises(ValidationError):
        SnapshotWriter(session).write_reference_batch(download_id, EntityKind.LEAGUE, [row])


def test_singleton_kind_is_not_a_reference_kind() -> None:
    session = _make_session()
    download_id = EpochManager(session).begin_epoch()

    with pytest.raises(ValidationError):
        SnapshotWriter(session).write_reference_batch(
            download_id, EntityKind.TEAM, [{"id": 1, "name": "x"}]
        )


def test_missing_download_is_an_integrity_error() -> None:
    session = _make_session()
    with pytest.raises(IntegrityError):
        SnapshotWriter(session).write_reference_batch(
            123, EntityKind.LANGUAGE, [{"id": 1, "name": "Svenska"}]
        )


@pytest.mark.parametrize("status", [DownloadStatus.PROMOTED, DownloadStatus.RETIRED])
def test_promoted_or_retired_download_refuses_writes(status: DownloadStatus) -> None:
    session = _make_session()
    epochs = EpochManager(session)
    download_id = epochs.begin_epoch()
    epochs.set_status(download_id, status)
    session.commit()

    writer = SnapshotWriter(session)
    with pytest.raises(ConcurrencyError):
        writer.write_reference_batch(download_id, EntityKind.LANGUAGE, [{"id": 1, "name": "x"}])
    with pytest.raises(ConcurrencyError):
        writer.write_attachment(1, download_id, b"img")


def test_upsert_singleton_last_write_wins() -> None:
    session = _make_session()
    writer = SnapshotWriter(session)

    writer.upsert_singleton(EntityKind.TEAM, 5, {"name": "Old Name", "league_id": 1})
    writer.upsert_singleton(EntityKind.TEAM, 5, {"name": "New Name", "league_id": 2})

    teams = list(session.execute(select(Team)).scalars().all())
    assert len(teams) == 1
    assert (teams[0].id, teams[0].name, teams[0].league_id) == (5, "New Name", 2)


def test_upsert_singleton_keeps_omitted_keys_and_writes_explicit_none() -> None:
    session = _make_session()
    writer = SnapshotWriter(session)

    writer.upsert_singleton(
        "player",
        77,
        {"team_id": 5, "first_name": "Kalle", "last_name": "Anka", "tsi": 1000, "injury_level": 2},
    )
    player = writer.upsert_singleton("player", 77, {"tsi": 1500, "injury_level": None})

    assert isinstance(player, Player)
    assert (player.first_name, player.tsi, player.injury_level) == ("Kalle", 1500, None)


def test_upsert_singleton_insert_requires_not_null_columns() -> None:
    session = _make_session()
    with pytest.raises(ValidationError):
        SnapshotWriter(session).upsert_singleton(EntityKind.PLAYER, 1, {"first_name": "Only"})


def test_upsert_singleton_rejects_unknown_columns_and_mismatched_id() -> None:
    session = _make_session()
    writer = SnapshotWriter(session)
    with pytest.raises(ValidationError):
        writer.upsert_singleton(EntityKind.TEAM, 1, {"name": "x", "stadium": "y"})
    with pytest.raises(ValidationError):
        writer.upsert_singleton(EntityKind.TEAM, 1, {"id": 2, "name": "x"})


def test_write_attachment_is_idempotent_and_conflicts_on_new_content() -> None:
    session = _make_session()
    download_id = EpochManager(session).begin_epoch()
    writer = SnapshotWriter(session)

    first = writer.write_attachment(9, download_id, b"\x89PNG-a")
    again = writer.write_attachment(9, download_id, b"\x89PNG-a")

    assert again.content_sha256 == first.content_sha256
    assert len(list(session.execute(select(Avatar)).scalars().all())) == 1

    with pytest.raises(ConflictError):
        writer.write_attachment(9, download_id, b"\x89PNG-b")


def test_write_attachment_rejects_empty_blob() -> None:
    session = _make_session()
    download_id = EpochManager(session).begin_epoch()
    with pytest.raises(ValidationError):
        SnapshotWriter(session).write_attachment(9, download_id, b"")


def test_latest_attachment_follows_newest_download() -> None:
    session = _make_session()
    epochs = EpochManager(session)
    writer = SnapshotWriter(session)
    first = epochs.begin_epoch()
    second = epochs.begin_epoch()

    writer.write_attachment(9, first, b"old")
    writer.write_attachment(9, second, b"new")

    latest = writer.latest_attachment(9)
    assert latest is not None
    assert (latest.download_id, latest.image) == (second, b"new")
    assert writer.latest_attachment(10) is None


def test_with_reference_names_uses_same_download() -> None:
    session = _make_session()
    epochs = EpochManager(session)
    writer = SnapshotWriter(session)
    old = epochs.begin_epoch()
    new = epochs.begin_epoch()
    writer.write_reference_batch(old, EntityKind.LEAGUE, [{"id": 1, "name": "Old League"}])
    writer.write_reference_batch(new, EntityKind.LEAGUE, [{"id": 1, "name": "New League"}])
    writer.write_reference_batch(new, EntityKind.COUNTRY, [{"id": 3, "name": "Sverige"}])

    attrs = writer.with_reference_names(
        new, {"name": "Team", "league_id": 1, "country_id": 3, "region_id": 99}
    )

    assert attrs["league_name"] == "New League"
    assert attrs["country_name"] == "Sverige"
    assert "region_name" not in attrs


class _OrderedLocks(KeyedLocks):
    """Remembers which thread got each lock, i.e. the commit order of upserts."""

    def __init__(self) -> None:
        super().__init__()
        self.order: list[str] = []

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with super().hold(key):
            self.order.append(threading.current_thread().name)
            yield


def test_concurrent_upserts_of_one_team_are_serialized(tmp_path: Path) -> None:
    engine = create_db_engine(
        DatabaseConfig(database_url=f"sqlite+pysqlite:///{tmp_path / 'upserts.db'}")
    )
    Base.metadata.create_all(engine)
    factory = create_session_factory(engine)
    locks = _OrderedLocks()
    rounds = 20
    start = threading.Barrier(2)
    errors: list[Exception] = []

    def upsert_many() -> None:
        name = threading.current_thread().name
        session = factory()
        writer = SnapshotWriter(session, locks=locks)
        start.wait()
        try:
            for i in range(rounds):
                writer.upsert_singleton(
                    EntityKind.TEAM, 500, {"name": f"{name}-{i}", "short_name": name}
                )
        except Exception as e:
            errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=upsert_many, name=n) for n in ("north", "south")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(locks.order) == 2 * rounds
    assert len(locks) == 0

    last = locks.order[-1]
    check = factory()
    teams = list(check.execute(select(Team)).scalars().all())
    assert len(teams) == 1
    assert teams[0].id == 500
    assert teams[0].name == f"{last}-{locks.order.count(last) - 1}"
    assert teams[0].short_name == last
    check.close()
    engine.dispose()
