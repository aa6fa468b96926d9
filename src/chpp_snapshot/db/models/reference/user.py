from __future__ import annotations

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from chpp_snapshot.db.base import Base, DownloadScopedMixin


class User(DownloadScopedMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    login_name: Mapped[str] = mapped_column(String, nullable=False)
    supporter_tier: Mapped[str] = mapped_column(String, nullable=False)

    # Provider dates are kept as the raw strings the API returns.
    signup_date: Mapped[str | None] = mapped_column(String, nullable=True)
    activation_date: Mapped[str | None] = mapped_column(String, nullable=True)
    last_login_date: Mapped[str | None] = mapped_column(String, nullable=True)

    has_manager_license: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    language_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    language_name: Mapped[str | None] = mapped_column(String, nullable=True)
