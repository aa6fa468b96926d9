"""Move player avatars into a download-scoped table

Revision ID: 4d1a6e8b2f53
Revises: 3c2e5f7a9d14
Create Date: 2026-02-11

"""

import hashlib
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "4d1a6e8b2f53"
down_revision: Union[str, Sequence[str], None] = "3c2e5f7a9d14"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "avatars",
        sa.Column("player_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("download_id", sa.Integer(), nullable=False),
        sa.Column("image", sa.LargeBinary(), nullable=False),
        sa.Column("content_sha256", sa.String(length=64), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["download_id"], ["downloads.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("player_id", "download_id"),
    )

    # Existing avatars are kept under the newest download (a synthetic one if there is none).
    conn = op.get_bind()
    rows = conn.execute(
        sa.text("SELECT id, avatar FROM players WHERE avatar IS NOT NULL")
    ).all()
    if rows:
        download_id = conn.execute(sa.text("SELECT MAX(id) FROM downloads")).scalar()
        if download_id is None:
            conn.execute(
                sa.text(
                    "INSERT INTO downloads (status, finished_at) "
                    "VALUES ('complete', CURRENT_TIMESTAMP)"
                )
            )
            download_id = conn.execute(sa.text("SELECT MAX(id) FROM downloads")).scalar_one()
        conn.execute(
            sa.text(
                "INSERT INTO avatars (player_id, download_id, image, content_sha256) "
                "VALUES (:player_id, :download_id, :image, :sha)"
            ),
            [
                {
                    "player_id": player_id,
                    "download_id": download_id,
                    "image": image,
                    "sha": hashlib.sha256(image).hexdigest(),
                }
                for player_id, image in rows
            ],
        )

    with op.batch_alter_table("players") as batch_op:
        batch_op.drop_column("avatar")


def downgrade() -> None:
    with op.batch_alter_table("players") as batch_op:
        batch_op.add_column(sa.Column("avatar", sa.LargeBinary(), nullable=True))

    op.execute(
        "UPDATE players SET avatar = ("
        "SELECT a.image FROM avatars a WHERE a.player_id = players.id "
        "ORDER BY a.download_id DESC LIMIT 1)"
    )
    op.drop_table("avatars")
