"""Scope reference tables by download

Reference rows become `(id, download_id)` keyed so several downloads can hold
their own copy side by side. Rows that already exist are moved under one
synthetic download.

Revision ID: 2b8f4d1e6c30
Revises: 1a7e3c9d0b21
Create Date: 2026-02-04

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "2b8f4d1e6c30"
down_revision: Union[str, Sequence[str], None] = "1a7e3c9d0b21"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_I, _S, _F, _B = sa.Integer, sa.String, sa.Float, sa.Boolean

# table -> [(column, type, nullable)], `id` excluded
_TABLES: dict[str, list[tuple[str, type, bool]]] = {
    "languages": [("name", _S, False)],
    "currencies": [("name", _S, False), ("rate", _F, True), ("symbol", _S, True)],
    "countries": [
        ("name", _S, False),
        ("currency_id", _I, True),
        ("country_code", _S, True),
        ("date_format", _S, True),
        ("time_format", _S, True),
        ("flag", _S, True),
    ],
    "regions": [("name", _S, False), ("country_id", _I, False)],
    "leagues": [
        ("name", _S, False),
        ("country_id", _I, True),
        ("language_id", _I, True),
        ("short_name", _S, True),
        ("english_name", _S, True),
        ("continent", _S, True),
        ("zone_name", _S, True),
        ("season", _I, True),
        ("season_offset", _I, True),
        ("match_round", _I, True),
        ("national_team_id", _I, True),
        ("u20_team_id", _I, True),
        ("active_teams", _I, True),
        ("active_users", _I, True),
        ("number_of_levels", _I, True),
    ],
    "cups": [
        ("name", _S, False),
        ("league_level", _I, True),
        ("level", _I, True),
        ("level_index", _I, True),
        ("match_round", _I, True),
        ("match_rounds_left", _I, True),
    ],
    "users": [
        ("name", _S, False),
        ("login_name", _S, False),
        ("supporter_tier", _S, False),
        ("signup_date", _S, True),
        ("activation_date", _S, True),
        ("last_login_date", _S, True),
        ("has_manager_license", _B, True),
        ("language_id", _I, True),
        ("language_name", _S, True),
    ],
}


def _columns(table: str) -> list[sa.Column]:
    return [sa.Column(name, type_(), nullable=nullable) for name, type_, nullable in _TABLES[table]]


def _column_list(table: str) -> str:
    return ", ".join(["id", *(name for name, _, _ in _TABLES[table])])


def upgrade() -> None:
    conn = op.get_bind()

    has_rows = any(
        conn.execute(sa.text(f"SELECT 1 FROM {table} LIMIT 1")).first() is not None
        for table in _TABLES
    )
    legacy_download_id = None
    if has_rows:
        conn.execute(
            sa.text(
                "INSERT INTO downloads (status, finished_at) "
                "VALUES ('complete', CURRENT_TIMESTAMP)"
            )
        )
        legacy_download_id = conn.execute(sa.text("SELECT MAX(id) FROM downloads")).scalar_one()

    for table in _TABLES:
        scoped = f"{table}_scoped"
        op.create_table(
            scoped,
            sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
            *_columns(table),
            sa.Column("download_id", sa.Integer(), nullable=False),
            sa.ForeignKeyConstraint(["download_id"], ["downloads.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id", "download_id"),
        )
        if legacy_download_id is not None:
            cols = _column_list(table)
            conn.execute(
                sa.text(
                    f"INSERT INTO {scoped} ({cols}, download_id) "
                    f"SELECT {cols}, :download_id FROM {table}"
                ),
                {"download_id": legacy_download_id},
            )
        op.drop_table(table)
        op.rename_table(scoped, table)


def downgrade() -> None:
    conn = op.get_bind()

    for table in _TABLES:
        legacy = f"{table}_legacy"
        op.create_table(
            legacy,
            sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
            *_columns(table),
            sa.PrimaryKeyConstraint("id"),
        )
        # Keep the most recent download's row for each natural id.
        cols = _column_list(table)
        conn.execute(
            sa.text(
                f"INSERT INTO {legacy} ({cols}) "
                f"SELECT {cols} FROM {table} t "
                f"WHERE t.download_id = "
                f"(SELECT MAX(c.download_id) FROM {table} c WHERE c.id = t.id)"
            )
        )
        op.drop_table(table)
        op.rename_table(legacy, table)
