"""Initial schema

Revision ID: 1a7e3c9d0b21
Revises:
Create Date: 2026-02-01

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "1a7e3c9d0b21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "downloads",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "started_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=16), server_default="open", nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_downloads_status", "downloads", ["status"], unique=False)

    # Reference data starts out keyed by natural id only; 2b8f4d1e6c30 scopes it per download.
    op.create_table(
        "languages",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "currencies",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("rate", sa.Float(), nullable=True),
        sa.Column("symbol", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "countries",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("currency_id", sa.Integer(), nullable=True),
        sa.Column("country_code", sa.String(), nullable=True),
        sa.Column("date_format", sa.String(), nullable=True),
        sa.Column("time_format", sa.String(), nullable=True),
        sa.Column("flag", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "regions",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("country_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "leagues",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("country_id", sa.Integer(), nullable=True),
        sa.Column("language_id", sa.Integer(), nullable=True),
        sa.Column("short_name", sa.String(), nullable=True),
        sa.Column("english_name", sa.String(), nullable=True),
        sa.Column("continent", sa.String(), nullable=True),
        sa.Column("zone_name", sa.String(), nullable=True),
        sa.Column("season", sa.Integer(), nullable=True),
        sa.Column("season_offset", sa.Integer(), nullable=True),
        sa.Column("match_round", sa.Integer(), nullable=True),
        sa.Column("national_team_id", sa.Integer(), nullable=True),
        sa.Column("u20_team_id", sa.Integer(), nullable=True),
        sa.Column("active_teams", sa.Integer(), nullable=True),
        sa.Column("active_users", sa.Integer(), nullable=True),
        sa.Column("number_of_levels", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "cups",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("league_level", sa.Integer(), nullable=True),
        sa.Column("level", sa.Integer(), nullable=True),
        sa.Column("level_index", sa.Integer(), nullable=True),
        sa.Column("match_round", sa.Integer(), nullable=True),
        sa.Column("match_rounds_left", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("login_name", sa.String(), nullable=False),
        sa.Column("supporter_tier", sa.String(), nullable=False),
        sa.Column("signup_date", sa.String(), nullable=True),
        sa.Column("activation_date", sa.String(), nullable=True),
        sa.Column("last_login_date", sa.String(), nullable=True),
        sa.Column("has_manager_license", sa.Boolean(), nullable=True),
        sa.Column("language_id", sa.Integer(), nullable=True),
        sa.Column("language_name", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("short_name", sa.String(), nullable=True),
        sa.Column("raw_data", sa.Text(), nullable=True),
        sa.Column("is_primary_club", sa.Boolean(), nullable=True),
        sa.Column("founded_date", sa.String(), nullable=True),
        sa.Column("homepage", sa.String(), nullable=True),
        sa.Column("logo_url", sa.String(), nullable=True),
        sa.Column("dress_uri", sa.String(), nullable=True),
        sa.Column("dress_alternate_uri", sa.String(), nullable=True),
        sa.Column("color_background", sa.String(), nullable=True),
        sa.Column("color_primary", sa.String(), nullable=True),
        sa.Column("arena_id", sa.Integer(), nullable=True),
        sa.Column("arena_name", sa.String(), nullable=True),
        sa.Column("league_id", sa.Integer(), nullable=True),
        sa.Column("league_name", sa.String(), nullable=True),
        sa.Column("country_id", sa.Integer(), nullable=True),
        sa.Column("country_name", sa.String(), nullable=True),
        sa.Column("region_id", sa.Integer(), nullable=True),
        sa.Column("region_name", sa.String(), nullable=True),
        sa.Column("league_level_unit_id", sa.Integer(), nullable=True),
        sa.Column("league_level_unit_name", sa.String(), nullable=True),
        sa.Column("league_level", sa.Integer(), nullable=True),
        sa.Column("cup_still_in", sa.Boolean(), nullable=True),
        sa.Column("cup_id", sa.Integer(), nullable=True),
        sa.Column("cup_name", sa.String(), nullable=True),
        sa.Column("cup_match_round", sa.Integer(), nullable=True),
        sa.Column("cup_match_rounds_left", sa.Integer(), nullable=True),
        sa.Column("trainer_id", sa.Integer(), nullable=True),
        sa.Column("friendly_team_id", sa.Integer(), nullable=True),
        sa.Column("youth_team_id", sa.Integer(), nullable=True),
        sa.Column("youth_team_name", sa.String(), nullable=True),
        sa.Column("power_rating_global", sa.Integer(), nullable=True),
        sa.Column("power_rating_league", sa.Integer(), nullable=True),
        sa.Column("power_rating_region", sa.Integer(), nullable=True),
        sa.Column("power_rating_indiv", sa.Integer(), nullable=True),
        sa.Column("number_of_victories", sa.Integer(), nullable=True),
        sa.Column("number_of_undefeated", sa.Integer(), nullable=True),
        sa.Column("number_of_visits", sa.Integer(), nullable=True),
        sa.Column("team_rank", sa.Integer(), nullable=True),
        sa.Column("fanclub_id", sa.Integer(), nullable=True),
        sa.Column("fanclub_name", sa.String(), nullable=True),
        sa.Column("fanclub_size", sa.Integer(), nullable=True),
        sa.Column("is_bot", sa.Boolean(), nullable=True),
        sa.Column("bot_since", sa.String(), nullable=True),
        sa.Column("gender_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("nick_name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("player_number", sa.Integer(), nullable=True),
        sa.Column("statement", sa.String(), nullable=True),
        sa.Column("arrival_date", sa.String(), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("age_days", sa.Integer(), nullable=True),
        sa.Column("tsi", sa.Integer(), nullable=True),
        sa.Column("salary", sa.Integer(), nullable=True),
        sa.Column("player_form", sa.Integer(), nullable=True),
        sa.Column("experience", sa.Integer(), nullable=True),
        sa.Column("loyalty", sa.Integer(), nullable=True),
        sa.Column("leadership", sa.Integer(), nullable=True),
        sa.Column("mother_club_bonus", sa.Boolean(), nullable=True),
        sa.Column("is_abroad", sa.Boolean(), nullable=True),
        sa.Column("transfer_listed", sa.Boolean(), nullable=True),
        sa.Column("agreeability", sa.Integer(), nullable=True),
        sa.Column("aggressiveness", sa.Integer(), nullable=True),
        sa.Column("honesty", sa.Integer(), nullable=True),
        sa.Column("specialty", sa.Integer(), nullable=True),
        sa.Column("stamina_skill", sa.Integer(), nullable=True),
        sa.Column("keeper_skill", sa.Integer(), nullable=True),
        sa.Column("playmaker_skill", sa.Integer(), nullable=True),
        sa.Column("scorer_skill", sa.Integer(), nullable=True),
        sa.Column("passing_skill", sa.Integer(), nullable=True),
        sa.Column("winger_skill", sa.Integer(), nullable=True),
        sa.Column("defender_skill", sa.Integer(), nullable=True),
        sa.Column("set_pieces_skill", sa.Integer(), nullable=True),
        sa.Column("league_goals", sa.Integer(), nullable=True),
        sa.Column("cup_goals", sa.Integer(), nullable=True),
        sa.Column("friendlies_goals", sa.Integer(), nullable=True),
        sa.Column("career_goals", sa.Integer(), nullable=True),
        sa.Column("career_hattricks", sa.Integer(), nullable=True),
        sa.Column("career_assists", sa.Integer(), nullable=True),
        sa.Column("cards", sa.Integer(), nullable=True),
        sa.Column("injury_level", sa.Integer(), nullable=True),
        sa.Column("country_id", sa.Integer(), nullable=True),
        sa.Column("national_team_id", sa.Integer(), nullable=True),
        sa.Column("caps", sa.Integer(), nullable=True),
        sa.Column("caps_u20", sa.Integer(), nullable=True),
        sa.Column("last_match_date", sa.String(), nullable=True),
        sa.Column("last_match_id", sa.Integer(), nullable=True),
        sa.Column("last_match_position_code", sa.Integer(), nullable=True),
        sa.Column("last_match_played_minutes", sa.Integer(), nullable=True),
        sa.Column("last_match_rating", sa.Integer(), nullable=True),
        sa.Column("mother_club_team_id", sa.Integer(), nullable=True),
        sa.Column("mother_club_team_name", sa.String(), nullable=True),
        sa.Column("gender_id", sa.Integer(), nullable=True),
        *_timestamps(),
        # Moved to the download-scoped avatars table in 4d1a6e8b2f53.
        sa.Column("avatar", sa.LargeBinary(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_players_team_id", "players", ["team_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_players_team_id", table_name="players")
    op.drop_table("players")
    op.drop_table("teams")
    op.drop_table("users")
    op.drop_table("cups")
    op.drop_table("leagues")
    op.drop_table("regions")
    op.drop_table("countries")
    op.drop_table("currencies")
    op.drop_table("languages")
    op.drop_index("ix_downloads_status", table_name="downloads")
    op.drop_table("downloads")
