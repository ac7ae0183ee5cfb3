"""Pydantic v2 schemas for the representative directory and user mapping."""

import uuid
from datetime import datetime

from pydantic import BaseModel


class RepresentativeResponse(BaseModel):
    """A directory entry as exposed to the owning user."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    source: str
    name: str
    party: str | None = None
    photo_url: str | None = None
    office_name: str | None = None
    level: str
    chamber: str | None = None
    state: str | None = None
    district: str | None = None
    division_id: str | None = None
    email: str | None = None
    contact_form_url: str | None = None
    phone: str | None = None
    website: str | None = None
    twitter_handle: str | None = None
    facebook_page_url: str | None = None
    last_synced: datetime | None = None


class AssignResponse(BaseModel):
    """Result of a mapping run."""

    assigned_count: int
    state: str | None = None
    message: str | None = None


class SyncResponse(BaseModel):
    """Rows written by a chamber-based sync."""

    ok: bool = True
    seeded: dict[str, int]


class CivicSyncResponse(BaseModel):
    ok: bool = True
    seeded: int
