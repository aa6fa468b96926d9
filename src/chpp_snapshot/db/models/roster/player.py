from __future__ import annotations

from sqlalchemy import Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from chpp_snapshot.db.base import Base, TimestampMixin


class Player(Base, TimestampMixin):
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    team_id: Mapped[int] = mapped_column(Integer, nullable=False)

    first_name: Mapped[str] = mapped_column(String, nullable=False)
    nick_name: Mapped[str | None] = mapped_column(String, nullable=True)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    player_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    statement: Mapped[str | None] = mapped_column(String, nullable=True)
    arrival_date: Mapped[str | None] = mapped_column(String, nullable=True)

    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    age_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tsi: Mapped[int | None] = mapped_column(Integer, nullable=True)
    salary: Mapped[int | None] = mapped_column(Integer, nullable=True)
    player_form: Mapped[int | None] = mapped_column(Integer, nullable=True)
    experience: Mapped[int | None] = mapped_column(Integer, nullable=True)
    loyalty: Mapped[int | None] = mapped_column(Integer, nullable=True)
    leadership: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mother_club_bonus: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    is_abroad: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    transfer_listed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Personality
    agreeability: Mapped[int | None] = mapped_column(Integer, nullable=True)
    aggressiveness: Mapped[int | None] = mapped_column(Integer, nullable=True)
    honesty: Mapped[int | None] = mapped_column(Integer, nullable=True)
    specialty: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Skills are only visible for the owner's own players.
    stamina_skill: Mapped[int | None] = mapped_column(Integer, nullable=True)
    keeper_skill: Mapped[int | None] = mapped_column(Integer, nullable=True)
    playmaker_skill: Mapped[int | None] = mapped_column(Integer, nullable=True)
    scorer_skill: Mapped[int | None] = mapped_column(Integer, nullable=True)
    passing_skill: Mapped[int | None] = mapped_column(Integer, nullable=True)
    winger_skill: Mapped[int | None] = mapped_column(Integer, nullable=True)
    defender_skill: Mapped[int | None] = mapped_column(Integer, nullable=True)
    set_pieces_skill: Mapped[int | None] = mapped_column(Integer, nullable=True)

    league_goals: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cup_goals: Mapped[int | None] = mapped_column(Integer, nullable=True)
    friendlies_goals: Mapped[int | None] = mapped_column(Integer, nullable=True)
    career_goals: Mapped[int | None] = mapped_column(Integer, nullable=True)
    career_hattricks: Mapped[int | None] = mapped_column(Integer, nullable=True)
    career_assists: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cards: Mapped[int | None] = mapped_column(Integer, nullable=True)
    injury_level: Mapped[int | None] = mapped_column(Integer, nullable=True)

    country_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    national_team_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    caps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    caps_u20: Mapped[int | None] = mapped_column(Integer, nullable=True)

    last_match_date: Mapped[str | None] = mapped_column(String, nullable=True)
    last_match_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_match_position_code: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_match_played_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_match_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)

    mother_club_team_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mother_club_team_name: Mapped[str | None] = mapped_column(String, nullable=True)
    gender_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (Index("ix_players_team_id", "team_id"),)
