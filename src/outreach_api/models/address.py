"""UserAddress model: a user's mailing address and detected legislative districts.

Rows are created with a ZIP only and enriched later by district detection.
``line1`` and ``city`` are persisted only when the user opts in.  At most one
row per user is primary.
"""

import uuid

from sqlalchemy import Boolean, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from outreach_api.models.base import Base, TimestampMixin, UUIDMixin


class UserAddress(Base, UUIDMixin, TimestampMixin):
    """Address with congressional (cd), state senate (sd), and state house (hd) districts."""

    __tablename__ = "user_addresses"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    line1: Mapped[str | None] = mapped_column(String(200), nullable=True)
    line2: Mapped[str | None] = mapped_column(String(200), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(2), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    country: Mapped[str] = mapped_column(String(2), nullable=False, default="US", server_default="US")

    # Detected districts; cd may hold the "At-Large" sentinel
    cd: Mapped[str | None] = mapped_column(String(20), nullable=True)
    sd: Mapped[str | None] = mapped_column(String(20), nullable=True)
    hd: Mapped[str | None] = mapped_column(String(20), nullable=True)

    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")

    __table_args__ = (
        Index("ix_user_addresses_user_id", "user_id"),
        Index(
            "uq_user_addresses_one_primary",
            "user_id",
            unique=True,
            postgresql_where=text("is_primary"),
            sqlite_where=text("is_primary = 1"),
        ),
    )
