from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, func
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class DownloadScopedMixin:
    """Second half of the `(id, download_id)` composite key for epoch-scoped tables.

    The foreign key cascades, so deleting a `Download` removes every row scoped to it.
    """

    @declared_attr
    def download_id(cls) -> Mapped[int]:
        return mapped_column(
            ForeignKey("downloads.id", ondelete="CASCADE"),
            primary_key=True,
            nullable=False,
        )
