"""UserRepresentative model: binding of a user to the representatives of their geography."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from outreach_api.models.base import Base


class UserRepresentative(Base):
    """One (user, representative) binding; the whole set is replaced on each mapping run."""

    __tablename__ = "user_representatives"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    rep_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("representatives.id", ondelete="CASCADE"), primary_key=True
    )
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (CheckConstraint("level IN ('federal', 'state', 'local')", name="ck_user_representatives_level"),)
