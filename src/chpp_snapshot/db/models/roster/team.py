from __future__ import annotations

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from chpp_snapshot.db.base import Base, TimestampMixin


class Team(Base, TimestampMixin):
    """Latest known state of a team, keyed by the provider's team id.

    The `*_name` columns are copies taken from the reference tables of the download
    that last wrote the row; they are not foreign keys.
    """

    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    name: Mapped[str] = mapped_column(String, nullable=False)
    short_name: Mapped[str | None] = mapped_column(String, nullable=True)
    raw_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_primary_club: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    founded_date: Mapped[str | None] = mapped_column(String, nullable=True)
    homepage: Mapped[str | None] = mapped_column(String, nullable=True)
    logo_url: Mapped[str | None] = mapped_column(String, nullable=True)
    dress_uri: Mapped[str | None] = mapped_column(String, nullable=True)
    dress_alternate_uri: Mapped[str | None] = mapped_column(String, nullable=True)
    color_background: Mapped[str | None] = mapped_column(String, nullable=True)
    color_primary: Mapped[str | None] = mapped_column(String, nullable=True)

    arena_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    arena_name: Mapped[str | None] = mapped_column(String, nullable=True)

    league_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    league_name: Mapped[str | None] = mapped_column(String, nullable=True)
    country_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    country_name: Mapped[str | None] = mapped_column(String, nullable=True)
    region_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    region_name: Mapped[str | None] = mapped_column(String, nullable=True)

    league_level_unit_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    league_level_unit_name: Mapped[str | None] = mapped_column(String, nullable=True)
    league_level: Mapped[int | None] = mapped_column(Integer, nullable=True)

    cup_still_in: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    cup_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cup_name: Mapped[str | None] = mapped_column(String, nullable=True)
    cup_match_round: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cup_match_rounds_left: Mapped[int | None] = mapped_column(Integer, nullable=True)

    trainer_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    friendly_team_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    youth_team_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    youth_team_name: Mapped[str | None] = mapped_column(String, nullable=True)

    power_rating_global: Mapped[int | None] = mapped_column(Integer, nullable=True)
    power_rating_league: Mapped[int | None] = mapped_column(Integer, nullable=True)
    power_rating_region: Mapped[int | None] = mapped_column(Integer, nullable=True)
    power_rating_indiv: Mapped[int | None] = mapped_column(Integer, nullable=True)

    number_of_victories: Mapped[int | None] = mapped_column(Integer, nullable=True)
    number_of_undefeated: Mapped[int | None] = mapped_column(Integer, nullable=True)
    number_of_visits: Mapped[int | None] = mapped_column(Integer, nullable=True)
    team_rank: Mapped[int | None] = mapped_column(Integer, nullable=True)

    fanclub_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fanclub_name: Mapped[str | None] = mapped_column(String, nullable=True)
    fanclub_size: Mapped[int | None] = mapped_column(Integer, nullable=True)

    is_bot: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    bot_since: Mapped[str | None] = mapped_column(String, nullable=True)
    gender_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
