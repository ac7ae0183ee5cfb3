"""Pydantic v2 schemas for the outreach queue and dispatcher."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Queue
# ---------------------------------------------------------------------------


class EnqueueRequest(BaseModel):
    """Queue a prayer for delivery.

    ``rep_ids`` restricts delivery to a subset of the caller's mapped
    representatives; ``president`` targets the president instead.
    """

    prayer_id: uuid.UUID
    channels: list[str] = Field(default_factory=lambda: ["email"], min_length=1)
    rep_ids: list[uuid.UUID] | None = None
    subject: str | None = Field(default=None, max_length=300)
    body: str | None = None
    president: bool = False


class OutreachRequestResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: uuid.UUID
    user_id: uuid.UUID
    prayer_id: uuid.UUID
    target_rep_id: uuid.UUID | None = None
    channels: list[str]
    status: str
    subject: str | None = None
    body: str | None = None
    error: str | None = None
    send_date: date
    created_at: datetime
    updated_at: datetime
    sent_at: datetime | None = None


class PrayerAnalyticsResponse(BaseModel):
    prayer_id: uuid.UUID
    total: int
    by_status: dict[str, int]
    by_channel: dict[str, int]


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class ProcessRequest(BaseModel):
    """Body of the dispatcher endpoint; ``action`` selects the operation."""

    action: str
    ids: list[uuid.UUID] | None = None
    request_id: uuid.UUID | None = None
    prayer_id: uuid.UUID | None = None
