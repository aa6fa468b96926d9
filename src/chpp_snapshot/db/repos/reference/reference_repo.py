from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from chpp_snapshot.db.repos.base import BaseRepository, ModelT


class ReferenceRepository(BaseRepository[ModelT]):
    """Repository for an epoch-scoped reference model keyed by `(id, download_id)`.

    Every lookup takes the download id; natural ids alone are ambiguous across epochs.
    """

    def __init__(self, session: Session, model: type[ModelT]) -> None:
        super().__init__(session=session, model=model)

    def for_download(self, download_id: int) -> list[ModelT]:
        model: Any = self.model
        stmt = select(self.model).where(model.download_id == download_id).order_by(model.id)
        return list(self.session.execute(stmt).scalars().all())

    def get_scoped(self, natural_id: int, download_id: int) -> ModelT | None:
        model: Any = self.model
        return self.first_where(model.id == natural_id, model.download_id == download_id)

    def count_for_download(self, download_id: int) -> int:
        model: Any = self.model
        stmt = select(func.count()).select_from(self.model).where(model.download_id == download_id)
        return int(self.session.execute(stmt).scalar_one())

    def existing_ids(self, download_id: int, natural_ids: Iterable[int]) -> set[int]:
        model: Any = self.model
        ids = list(natural_ids)
        if not ids:
            return set()
        stmt = select(model.id).where(model.download_id == download_id, model.id.in_(ids))
        return set(self.session.execute(stmt).scalars().all())
