"""Abstract base interface for representative-directory providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import httpx


@dataclass
class OfficialRecord:
    """Normalized representation of an office holder from any provider.

    Providers parse their raw responses into this common shape so the
    directory sync can replace slots without knowing provider details.
    """

    # Source identification
    source_name: str
    external_id: str | None

    # Person
    name: str
    party: str | None = None
    photo_url: str | None = None

    # Seat
    office_name: str | None = None
    level: str = "federal"
    chamber: str | None = None
    state: str | None = None
    district: str | None = None
    division_id: str | None = None

    # Contact
    email: str | None = None
    contact_form_url: str | None = None
    phone: str | None = None
    website: str | None = None
    twitter_handle: str | None = None
    facebook_page_url: str | None = None

    # Raw response for auditing
    raw_data: dict = field(default_factory=dict)

    @property
    def slot(self) -> tuple[str, str | None, str | None, str | None]:
        """(level, chamber, state, district) key used for replace-on-sync."""
        return (self.level, self.chamber, self.state, self.district)


class OfficialsProviderError(Exception):
    """Raised when a provider experiences a transport or service error.

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


class OfficialsConfigError(Exception):
    """Raised when a provider is used without its API key configured."""


class BaseOfficialsProvider(ABC):
    """Abstract interface for directory providers.

    Concrete implementations (Congress.gov, Open States, Google Civic) own
    an ``httpx.AsyncClient`` and expose provider-specific fetch methods that
    return ``OfficialRecord`` lists.
    """

    _client: httpx.AsyncClient

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique short name for this provider (e.g. 'open_states')."""

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "BaseOfficialsProvider":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
