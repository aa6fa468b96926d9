from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from chpp_snapshot.db.base import Base, DownloadScopedMixin


class Country(DownloadScopedMixin, Base):
    __tablename__ = "countries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String, nullable=False)

    # Natural id of a Currency in the same download.
    currency_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    country_code: Mapped[str | None] = mapped_column(String, nullable=True)
    date_format: Mapped[str | None] = mapped_column(String, nullable=True)
    time_format: Mapped[str | None] = mapped_column(String, nullable=True)
    flag: Mapped[str | None] = mapped_column(String, nullable=True)
