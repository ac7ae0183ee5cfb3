"""User profile model.

Identity and credentials live with the external identity provider; this
table holds the profile fields the outreach pipeline needs (email for
Reply-To, membership tier for channel gating).
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from outreach_api.models.base import Base, UUIDMixin

USER_TIERS = ("free", "supporter", "patron", "admin")


class User(Base, UUIDMixin):
    """Application user profile keyed by the identity provider's user id."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    tier: Mapped[str] = mapped_column(String(20), nullable=False, default="free", server_default="free")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (CheckConstraint("tier IN ('free', 'supporter', 'patron', 'admin')", name="ck_users_tier"),)
