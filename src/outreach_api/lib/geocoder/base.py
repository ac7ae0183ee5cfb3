"""Shared types for address-to-district resolution."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

AT_LARGE = "At-Large"


@dataclass
class AddressInput:
    """Partial postal address as submitted by a user."""

    line1: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None

    def __post_init__(self) -> None:
        self.line1 = _clean(self.line1)
        self.city = _clean(self.city)
        self.state = _clean(self.state)
        self.postal_code = _clean(self.postal_code)
        if self.state:
            self.state = self.state.upper()

    @property
    def has_locality(self) -> bool:
        """True when any of street, city, or state is present."""
        return bool(self.line1 or self.city or self.state)

    @property
    def is_zip_only(self) -> bool:
        return bool(self.postal_code) and not self.has_locality

    def one_line(self) -> str:
        """Comma-joined single-line form of the populated fields."""
        tail = " ".join(p for p in (self.state, self.postal_code) if p)
        return ", ".join(p for p in (self.line1, self.city, tail) if p)


@dataclass
class DistrictResult:
    """Resolved districts for an address.

    ``cd`` is a bare district number or the ``AT_LARGE`` sentinel.  Every
    field may be None; ``note`` explains an empty or partial result.
    """

    state: str | None = None
    cd: str | None = None
    sd: str | None = None
    hd: str | None = None
    note: str | None = None

    @property
    def has_districts(self) -> bool:
        return bool(self.cd or self.sd or self.hd)

    def to_dict(self) -> dict[str, str | None]:
        data: dict[str, str | None] = {"state": self.state, "cd": self.cd, "sd": self.sd, "hd": self.hd}
        if self.note:
            data["note"] = self.note
        return data


class MatchStatus(StrEnum):
    """Tagged outcome of one resolution strategy."""

    MATCHED = "matched"
    AMBIGUOUS = "ambiguous"
    FAILED = "failed"


@dataclass
class StrategyOutcome:
    """Result of running a single resolution strategy."""

    strategy: str
    status: MatchStatus
    state: str | None = None
    geographies: dict[str, Any] = field(default_factory=dict)
    detail: str | None = None


class GeocodingProviderError(Exception):
    """Raised when the geocoding service experiences a transport or service error.

    Args:
        provider_name: Name of the failing provider.
        message: Human-readable error description.
        status_code: Optional HTTP status code from the provider.
    """

    def __init__(self, provider_name: str, message: str, status_code: int | None = None) -> None:
        self.provider_name = provider_name
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider_name}: {message}")


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None
