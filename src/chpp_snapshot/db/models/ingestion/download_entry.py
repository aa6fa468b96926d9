from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from chpp_snapshot.db.base import Base, TimestampMixin
from chpp_snapshot.db.enums import EntryStatus


class DownloadEntry(Base, TimestampMixin):
    __tablename__ = "download_entries"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    download_id: Mapped[int] = mapped_column(
        ForeignKey("downloads.id", ondelete="CASCADE"), nullable=False
    )
    endpoint: Mapped[str] = mapped_column(String, nullable=False)  # e.g. "worlddetails"
    version: Mapped[str] = mapped_column(String, nullable=False)  # e.g. "1.9"
    user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=EntryStatus.PENDING.value, server_default="pending"
    )
    fetched_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    retry_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        UniqueConstraint(
            "download_id", "endpoint", "version", name="uq_download_entries_identity"
        ),
        Index("ix_download_entries_download_id", "download_id"),
        Index("ix_download_entries_status", "status"),
    )
