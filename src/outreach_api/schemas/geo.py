"""Pydantic v2 schemas for district detection and address persistence."""

from pydantic import BaseModel, Field


class DetectRequest(BaseModel):
    """Partial postal address submitted for district detection."""

    line1: str | None = Field(default=None, max_length=200)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=50)
    postal_code: str | None = Field(default=None, max_length=10)


class DetectResponse(BaseModel):
    """Detected state and districts; every field may be null."""

    state: str | None = None
    cd: str | None = None
    sd: str | None = None
    hd: str | None = None
    note: str | None = None


class SaveDistrictsRequest(BaseModel):
    """Districts to persist on the caller's primary address."""

    state: str = Field(min_length=2, max_length=2)
    cd: str | None = Field(default=None, max_length=20)
    sd: str | None = Field(default=None, max_length=20)
    hd: str | None = Field(default=None, max_length=20)
    postal_code: str | None = Field(default=None, max_length=10)
    persist_address: bool = False
    line1: str | None = Field(default=None, max_length=200)
    city: str | None = Field(default=None, max_length=100)


class SaveDistrictsResponse(BaseModel):
    ok: bool
    sync: dict[str, dict[str, int]] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)


class PrimaryZipRequest(BaseModel):
    postal_code: str = Field(max_length=10)


class PrimaryZipResponse(BaseModel):
    ok: bool
    locked: bool = False
    message: str | None = None
