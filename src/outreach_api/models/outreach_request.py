"""OutreachRequest model: one queued message from a user to a representative.

Status machine::

    queued -> sent
    queued -> failed
    failed | throttled -> queued   (same-day re-enqueue)

Rows are unique per (user, representative, prayer, send_date) and are never deleted.
"""

import uuid
from datetime import date, datetime

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Index, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from outreach_api.models.base import Base, JSONType, TimestampMixin, UUIDMixin

OUTREACH_STATUSES = ("queued", "sent", "failed", "throttled")
OUTREACH_CHANNELS = ("email", "x", "facebook")


class OutreachRequest(Base, UUIDMixin, TimestampMixin):
    """A user's request to deliver a prayer to one representative on one day."""

    __tablename__ = "outreach_requests"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    prayer_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("prayers.id", ondelete="CASCADE"), nullable=False)
    # Nulled when the directory row is removed by a resync
    target_rep_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("representatives.id", ondelete="SET NULL"), nullable=True
    )
    channels: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="queued", server_default="queued")
    subject: Mapped[str | None] = mapped_column(Text, nullable=True)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    send_date: Mapped[date] = mapped_column(Date, nullable=False)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "target_rep_id", "prayer_id", "send_date", name="uq_outreach_daily"),
        CheckConstraint("status IN ('queued', 'sent', 'failed', 'throttled')", name="ck_outreach_requests_status"),
        Index("ix_outreach_requests_status", "status"),
        Index("ix_outreach_requests_user_id", "user_id"),
        Index("ix_outreach_requests_prayer_id", "prayer_id"),
    )
