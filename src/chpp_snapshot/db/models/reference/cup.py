from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from chpp_snapshot.db.base import Base, DownloadScopedMixin


class Cup(DownloadScopedMixin, Base):
    __tablename__ = "cups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String, nullable=False)

    league_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    level_index: Mapped[int | None] = mapped_column(Integer, nullable=True)
    match_round: Mapped[int | None] = mapped_column(Integer, nullable=True)
    match_rounds_left: Mapped[int | None] = mapped_column(Integer, nullable=True)
