"""Representative model: directory of elected officials synced from upstream sources.

Rows are replaced per slot (level, chamber, state, district) on every sync so
the directory never accumulates stale office holders.
"""

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from outreach_api.models.base import Base, JSONType, TimestampMixin, UUIDMixin


class Representative(Base, UUIDMixin, TimestampMixin):
    """A single office holder as seen by one upstream source."""

    __tablename__ = "representatives"

    # Stable upstream person id (bioguide id, Open States id, or civic surrogate hash)
    external_id: Mapped[str | None] = mapped_column(String(200), nullable=True, unique=True)
    source: Mapped[str] = mapped_column(String(50), nullable=False)

    # Person
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    party: Mapped[str | None] = mapped_column(String(100), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Seat
    office_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    chamber: Mapped[str | None] = mapped_column(String(20), nullable=True)
    state: Mapped[str | None] = mapped_column(String(2), nullable=True)
    district: Mapped[str | None] = mapped_column(String(20), nullable=True)
    division_id: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Contact
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_form_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    website: Mapped[str | None] = mapped_column(Text, nullable=True)
    twitter_handle: Mapped[str | None] = mapped_column(String(100), nullable=True)
    facebook_page_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    last_synced: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=func.now())
    raw_data: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    __table_args__ = (
        CheckConstraint("level IN ('federal', 'state', 'local')", name="ck_representatives_level"),
        Index("ix_representatives_slot", "level", "chamber", "state", "district"),
        Index("ix_representatives_state", "state"),
    )
