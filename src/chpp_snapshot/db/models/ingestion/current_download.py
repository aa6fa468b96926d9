from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column

from chpp_snapshot.db.base import Base

CURRENT_POINTER_ID = 1


class CurrentDownload(Base):
    """Single-row pointer to the promoted epoch.

    The foreign key has no ON DELETE action, so the database refuses to delete the
    epoch that is currently promoted.
    """

    __tablename__ = "current_download"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    download_id: Mapped[int] = mapped_column(ForeignKey("downloads.id"), nullable=False)
    promoted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (CheckConstraint("id = 1", name="ck_current_download_single_row"),)
