from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from chpp_snapshot.db.base import Base
from chpp_snapshot.db.enums import DownloadStatus


class Download(Base):
    """One synchronization run (epoch).

    Epoch-scoped tables reference `downloads.id` with ON DELETE CASCADE; there are
    deliberately no ORM relationships here so retirement is a single DELETE handled
    by the database.
    """

    __tablename__ = "downloads"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=DownloadStatus.OPEN.value, server_default="open"
    )

    __table_args__ = (Index("ix_downloads_status", "status"),)
