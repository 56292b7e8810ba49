"""
ClientHub Backend - Administrator SQLAlchemy Model
===================================================

What:  ORM model for the `supermasters` table (administrator credentials).
Who:   Read by the auth service at login/change-password and by the auth gate
       when checking whether a token predates the administrator's last logout.
When:  Rows are provisioned outside this service; only `password` and
       `logged_out_at` are ever written here.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from clienthub.database import Base


class Supermaster(Base):
    """A tenant-wide administrator account."""

    __tablename__ = "supermasters"

    username: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
        comment="Unique login name",
    )

    # PBKDF2-SHA256 digest in passlib's modular crypt format
    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Salted one-way password hash",
    )

    # Tokens issued before this instant are rejected by the auth gate
    logged_out_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        comment="When the administrator last logged out (UTC)",
    )

    def __repr__(self) -> str:
        return f"<Supermaster(username='{self.username}', logged_out_at='{self.logged_out_at}')>"
