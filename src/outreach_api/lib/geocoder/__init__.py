"""Geocoder library: address to congressional and state legislative districts.

Public API:
    - AddressInput: Partial postal address
    - DistrictResult: Resolved state + CD/SD/HD with optional note
    - AT_LARGE: Sentinel for single-district (at-large) congressional seats
    - DistrictResolver: Ordered-strategy resolver (never raises)
    - CensusDistrictClient: Census geographies client
    - GeocodingProviderError: Provider-level error
"""

from outreach_api.lib.geocoder.base import (
    AT_LARGE,
    AddressInput,
    DistrictResult,
    GeocodingProviderError,
    MatchStatus,
    StrategyOutcome,
)
from outreach_api.lib.geocoder.census import CensusDistrictClient
from outreach_api.lib.geocoder.districts import extract_districts
from outreach_api.lib.geocoder.resolver import (
    DistrictResolver,
    OneLineAddressStrategy,
    ResolutionStrategy,
    StructuredAddressStrategy,
)

__all__ = [
    "AT_LARGE",
    "AddressInput",
    "CensusDistrictClient",
    "DistrictResolver",
    "DistrictResult",
    "GeocodingProviderError",
    "MatchStatus",
    "OneLineAddressStrategy",
    "ResolutionStrategy",
    "StrategyOutcome",
    "StructuredAddressStrategy",
    "extract_districts",
]
