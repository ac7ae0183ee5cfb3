"""Prayer model (minimal projection of the social feed's prayer posts)."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from outreach_api.models.base import Base, UUIDMixin


class Prayer(Base, UUIDMixin):
    """A prayer post whose text is carried by outreach messages."""

    __tablename__ = "prayers"

    author_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
