"""Create download entries

Revision ID: 3c2e5f7a9d14
Revises: 2b8f4d1e6c30
Create Date: 2026-02-04

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c2e5f7a9d14"
down_revision: Union[str, Sequence[str], None] = "2b8f4d1e6c30"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "download_entries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("download_id", sa.Integer(), nullable=False),
        sa.Column("endpoint", sa.String(), nullable=False),
        sa.Column("version", sa.String(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=16), server_default="pending", nullable=False),
        sa.Column("fetched_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("retry_count", sa.Integer(), server_default="0", nullable=False),
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
        sa.ForeignKeyConstraint(["download_id"], ["downloads.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "download_id", "endpoint", "version", name="uq_download_entries_identity"
        ),
    )
    op.create_index(
        "ix_download_entries_download_id", "download_entries", ["download_id"], unique=False
    )
    op.create_index("ix_download_entries_status", "download_entries", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_download_entries_status", table_name="download_entries")
    op.drop_index("ix_download_entries_download_id", table_name="download_entries")
    op.drop_table("download_entries")
