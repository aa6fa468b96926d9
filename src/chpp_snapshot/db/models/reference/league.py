from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from chpp_snapshot.db.base import Base, DownloadScopedMixin


class League(DownloadScopedMixin, Base):
    __tablename__ = "leagues"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String, nullable=False)

    # Natural ids resolved within the same download.
    country_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    language_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    short_name: Mapped[str | None] = mapped_column(String, nullable=True)
    english_name: Mapped[str | None] = mapped_column(String, nullable=True)
    continent: Mapped[str | None] = mapped_column(String, nullable=True)
    zone_name: Mapped[str | None] = mapped_column(String, nullable=True)

    season: Mapped[int | None] = mapped_column(Integer, nullable=True)
    season_offset: Mapped[int | None] = mapped_column(Integer, nullable=True)
    match_round: Mapped[int | None] = mapped_column(Integer, nullable=True)

    national_team_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    u20_team_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    active_teams: Mapped[int | None] = mapped_column(Integer, nullable=True)
    active_users: Mapped[int | None] = mapped_column(Integer, nullable=True)
    number_of_levels: Mapped[int | None] = mapped_column(Integer, nullable=True)
