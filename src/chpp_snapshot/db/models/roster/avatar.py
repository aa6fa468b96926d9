from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, LargeBinary, String, func
from sqlalchemy.orm import Mapped, mapped_column

from chpp_snapshot.db.base import Base, DownloadScopedMixin


class Avatar(DownloadScopedMixin, Base):
    """Avatar image of a player as seen in one download.

    Rows are only written when the image changed, so a player's avatars form a
    time series across downloads.
    """

    __tablename__ = "avatars"

    player_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    image: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    content_sha256: Mapped[str] = mapped_column(String(64), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
