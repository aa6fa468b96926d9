"""Create current download pointer

Revision ID: 5e9b2c4f8a67
Revises: 4d1a6e8b2f53
Create Date: 2026-02-12

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5e9b2c4f8a67"
down_revision: Union[str, Sequence[str], None] = "4d1a6e8b2f53"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # No ON DELETE: the promoted download cannot be deleted while it is current.
    op.create_table(
        "current_download",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("download_id", sa.Integer(), nullable=False),
        sa.Column(
            "promoted_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.CheckConstraint("id = 1", name="ck_current_download_single_row"),
        sa.ForeignKeyConstraint(["download_id"], ["downloads.id"]),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("current_download")
