from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import exc as sa_exc
from sqlalchemy import insert, select
from sqlalchemy.orm import Session

from chpp_snapshot.core.errors import ConflictError, IntegrityError, ValidationError
from chpp_snapshot.db.base import Base
from chpp_snapshot.db.enums import EntityKind
from chpp_snapshot.db.models.reference.country import Country
from chpp_snapshot.db.models.reference.cup import Cup
from chpp_snapshot.db.models.reference.league import League
from chpp_snapshot.db.models.reference.region import Region
from chpp_snapshot.db.models.roster.avatar import Avatar
from chpp_snapshot.db.repos.reference.reference_repo import ReferenceRepository
from chpp_snapshot.db.repos.roster.avatar_repo import AvatarRepository
from chpp_snapshot.sync.epochs import EpochManager
from chpp_snapshot.sync.kinds import reference_model, singleton_model
from chpp_snapshot.sync.locks import KeyedLocks, singleton_locks

logger = logging.getLogger(__name__)

# Maintained by the database or the ORM, never supplied by a payload.
_MANAGED_COLUMNS = ("created_at", "updated_at")

# (id column on Team, name column on Team, reference model)
_TEAM_DENORMALIZED = (
    ("league_id", "league_name", League),
    ("country_id", "country_name", Country),
    ("region_id", "region_name", Region),
    ("cup_id", "cup_name", Cup),
)


def _writable_columns(model: type[Base]) -> dict[str, Any]:
    return {c.name: c for c in model.__table__.columns if c.name not in _MANAGED_COLUMNS}


def _required_columns(model: type[Base]) -> set[str]:
    return {
        name
        for name, col in _writable_columns(model).items()
        if not col.nullable and col.default is None and col.server_default is None
    }


def _is_natural_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class SnapshotWriter:
    """Persists parsed payloads: epoch-scoped reference rows, singleton upserts, avatars."""

    def __init__(
        self,
        session: Session,
        *,
        locks: KeyedLocks | None = None,
        epochs: EpochManager | None = None,
    ) -> None:
        self.session = session
        self.locks = locks if locks is not None else singleton_locks
        self.epochs = epochs if epochs is not None else EpochManager(session)
        self.avatars = AvatarRepository(session)

    # ----- reference data -----

    def _validate_reference_rows(
        self,
        model: type[Base],
        download_id: int,
        rows: list[Mapping[str, Any]],
    ) -> list[dict[str, Any]]:
        columns = _writable_columns(model)
        required = _required_columns(model) - {"download_id"}
        table = model.__tablename__

        seen: set[int] = set()
        cleaned: list[dict[str, Any]] = []
        for idx, row in enumerate(rows):
            natural_id = row.get("id")
            if not _is_natural_id(natural_id):
                raise ValidationError(f"{table}[{idx}]: missing or non-integer id {natural_id!r}")

            unknown = set(row) - set(columns)
            if unknown:
                raise ValidationError(f"{table} id={natural_id}: unknown columns {sorted(unknown)}")

            missing = sorted(c for c in required if row.get(c) is None)
            if missing:
                raise ValidationError(f"{table} id={natural_id}: missing columns {missing}")

            scoped = row.get("download_id", download_id)
            if scoped != download_id:
                raise ValidationError(
                    f"{table} id={natural_id}: row scoped to download {scoped}, "
                    f"batch is for download {download_id}"
                )

            if natural_id in seen:
                raise ValidationError(f"{table}: duplicate id {natural_id} in batch")
            seen.add(natural_id)

            cleaned.append({**row, "download_id": download_id})
        return cleaned

    def write_reference_batch(
        self,
        download_id: int,
        entity_kind: EntityKind | str,
        rows: Iterable[Mapping[str, Any]],
    ) -> int:
        """
        Insert one batch of epoch-scoped reference rows in a single transaction.

        Epochs are append-only per kind: a natural id already written under this
        download is rejected rather than overwritten. Returns the number of rows written.
        """

        model = reference_model(entity_kind)
        rows = list(rows)

        self.epochs.require_writable(download_id)
        if not rows:
            return 0

        cleaned = self._validate_reference_rows(model, download_id, rows)

        repo = ReferenceRepository(self.session, model)
        already = repo.existing_ids(download_id, (r["id"] for r in cleaned))
        if already:
            raise ValidationError(
                f"{model.__tablename__}: ids {sorted(already)} "
                f"already written for download {download_id}"
            )

        try:
            self.session.execute(insert(model), cleaned)
            self.session.commit()
        except sa_exc.IntegrityError as e:
            self.session.rollback()
            raise IntegrityError(
                f"{model.__tablename__}: batch for download {download_id} rejected: {e.orig}"
            ) from e

        logger.debug(
            "Wrote %s %s rows for download %s", len(cleaned), model.__tablename__, download_id
        )
        return len(cleaned)

    def existing_reference_ids(
        self, download_id: int, entity_kind: EntityKind | str, natural_ids: Iterable[int]
    ) -> set[int]:
        return ReferenceRepository(self.session, reference_model(entity_kind)).existing_ids(
            download_id, natural_ids
        )

    # ----- singletons -----

    def upsert_singleton(
        self,
        entity_kind: EntityKind | str,
        natural_id: int,
        attributes: Mapping[str, Any],
    ) -> Base:
        """
        Insert or overwrite a team/player row keyed by natural id.

        Every provided attribute is written, including explicit None values, so the
        last writer wins for the keys it supplies. Keys it omits keep their stored value.
        """

        model = singleton_model(entity_kind)
        table = model.__tablename__
        if not _is_natural_id(natural_id):
            raise ValidationError(f"{table}: non-integer id {natural_id!r}")

        columns = _writable_columns(model)
        attrs = dict(attributes)
        if attrs.get("id", natural_id) != natural_id:
            raise ValidationError(
                f"{table}: attribute id {attrs['id']} does not match {natural_id}"
            )
        attrs.pop("id", None)

        unknown = set(attrs) - set(columns)
        if unknown:
            raise ValidationError(f"{table} id={natural_id}: unknown columns {sorted(unknown)}")

        model_any: Any = model
        with self.locks.hold((str(entity_kind), natural_id)):
            stmt = (
                select(model)
                .where(model_any.id == natural_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            obj = self.session.execute(stmt).scalars().first()

            if obj is None:
                required = _required_columns(model) - {"id"}
                missing = sorted(c for c in required if attrs.get(c) is None)
                if missing:
                    raise ValidationError(f"{table} id={natural_id}: missing columns {missing}")
                obj = model(id=natural_id, **attrs)
                self.session.add(obj)
            else:
                for key, value in attrs.items():
                    setattr(obj, key, value)

            try:
                self.session.flush()
                self.session.commit()
            except sa_exc.IntegrityError as e:
                self.session.rollback()
                raise IntegrityError(f"{table} id={natural_id}: upsert rejected: {e.orig}") from e

        return obj

    def with_reference_names(
        self, download_id: int, attributes: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Fill a team's denormalized names from the same download's reference rows."""

        out = dict(attributes)
        for id_key, name_key, model in _TEAM_DENORMALIZED:
            ref_id = out.get(id_key)
            if ref_id is None or out.get(name_key) is not None:
                continue
            row: Any = ReferenceRepository(self.session, model).get_scoped(ref_id, download_id)
            if row is not None:
                out[name_key] = row.name
        return out

    # ----- attachments -----

    def latest_attachment(self, player_id: int) -> Avatar | None:
        return self.avatars.latest_for_player(player_id)

    def write_attachment(self, player_id: int, download_id: int, blob: bytes) -> Avatar:
        """Store a player's avatar for one download. Identical re-writes are no-ops."""

        if not isinstance(blob, bytes | bytearray) or not blob:
            raise ValidationError(f"avatar for player {player_id}: empty or non-binary content")
        blob = bytes(blob)
        self.epochs.require_writable(download_id)

        digest = hashlib.sha256(blob).hexdigest()
        existing = self.avatars.first_where(
            Avatar.player_id == player_id, Avatar.download_id == download_id
        )
        if existing is not None:
            if existing.content_sha256 == digest and existing.image == blob:
                return existing
            raise ConflictError(
                f"avatar for player {player_id} in download {download_id} already stored "
                "with different content"
            )

        try:
            avatar = self.avatars.add(
                Avatar(
                    player_id=player_id,
                    download_id=download_id,
                    image=blob,
                    content_sha256=digest,
                ),
                flush=True,
            )
            self.session.commit()
        except sa_exc.IntegrityError as e:
            self.session.rollback()
            raise IntegrityError(
                f"avatar for player {player_id} in download {download_id} rejected: {e.orig}"
            ) from e
        return avatar
