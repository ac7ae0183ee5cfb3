"""Address-to-district resolver.

Runs an ordered list of strategies against the Census geographies service
and stops at the first MATCHED outcome.  Every failure is downgraded to an
empty result with an explanatory note; ``resolve`` never raises.
"""

from abc import ABC, abstractmethod

from loguru import logger

from outreach_api.lib.geocoder.base import (
    AddressInput,
    DistrictResult,
    GeocodingProviderError,
    MatchStatus,
    StrategyOutcome,
)
from outreach_api.lib.geocoder.census import CensusDistrictClient
from outreach_api.lib.geocoder.districts import extract_districts

NOTE_NO_INPUT = "Provide ZIP (and ideally state or city/street) to detect districts."
NOTE_ZIP_ONLY = "ZIP-only is ambiguous. Add your state or city/street for accurate district detection."
NOTE_NOT_GEOCODED = "Could not geocode that address. Try adjusting city/street and ensure a 2-letter state."
NOTE_NO_MATCH = "No address match. Add city/street and avoid ZIP+4 to disambiguate."
NOTE_NO_DISTRICTS = "No districts found. Try removing ZIP+4 and abbreviating road types (e.g., “Rd”, “Ave”)."


class ResolutionStrategy(ABC):
    """One way of asking the geocoding service about an address."""

    name: str = ""

    @abstractmethod
    async def attempt(self, client: CensusDistrictClient, address: AddressInput) -> StrategyOutcome:
        """Run the strategy; must not raise."""


class StructuredAddressStrategy(ResolutionStrategy):
    """Discrete street/city/state/zip query; requires a street line."""

    name = "structured"

    async def attempt(self, client: CensusDistrictClient, address: AddressInput) -> StrategyOutcome:
        if not address.line1:
            return StrategyOutcome(strategy=self.name, status=MatchStatus.FAILED, detail="no street line")
        try:
            data = await client.structured(address.line1, address.city, address.state, address.postal_code)
        except GeocodingProviderError as e:
            return StrategyOutcome(strategy=self.name, status=MatchStatus.FAILED, detail=e.message)
        return client.parse_response(self.name, data)


class OneLineAddressStrategy(ResolutionStrategy):
    """Single concatenated address query."""

    name = "one_line"

    async def attempt(self, client: CensusDistrictClient, address: AddressInput) -> StrategyOutcome:
        one_line = address.one_line()
        if not one_line:
            return StrategyOutcome(strategy=self.name, status=MatchStatus.FAILED, detail="empty address")
        try:
            data = await client.one_line(one_line)
        except GeocodingProviderError as e:
            return StrategyOutcome(strategy=self.name, status=MatchStatus.FAILED, detail=e.message)
        return client.parse_response(self.name, data)


DEFAULT_STRATEGIES: tuple[ResolutionStrategy, ...] = (StructuredAddressStrategy(), OneLineAddressStrategy())


class DistrictResolver:
    """Resolve a partial address into state + CD/SD/HD.

    Args:
        client: Census geographies client.
        strategies: Strategies tried in order.
    """

    def __init__(
        self,
        client: CensusDistrictClient | None = None,
        strategies: tuple[ResolutionStrategy, ...] = DEFAULT_STRATEGIES,
    ) -> None:
        self._client = client or CensusDistrictClient()
        self._strategies = strategies

    async def resolve(self, address: AddressInput) -> DistrictResult:
        """Resolve districts for ``address``.

        Returns:
            DistrictResult; empty with a ``note`` when the address cannot be
            placed.  Never raises.
        """
        if not address.postal_code and not address.has_locality:
            return DistrictResult(note=NOTE_NO_INPUT)
        if address.is_zip_only:
            return DistrictResult(note=NOTE_ZIP_ONLY)

        try:
            outcomes = await self._run(address)
        except Exception as e:  # noqa: BLE001
            logger.exception("District resolution failed unexpectedly")
            return DistrictResult(state=address.state, note=f"Server error during geocode: {e}")

        matched = next((o for o in outcomes if o.status == MatchStatus.MATCHED), None)
        if matched is None:
            return DistrictResult(state=address.state, note=self._note_for(outcomes))

        cd, sd, hd = extract_districts(matched.geographies)
        result = DistrictResult(state=matched.state or address.state, cd=cd, sd=sd, hd=hd)
        if not result.has_districts:
            result.note = NOTE_NO_DISTRICTS
        logger.debug("Resolved districts via {} strategy", matched.strategy)
        return result

    async def _run(self, address: AddressInput) -> list[StrategyOutcome]:
        outcomes: list[StrategyOutcome] = []
        for strategy in self._strategies:
            outcome = await strategy.attempt(self._client, address)
            outcomes.append(outcome)
            if outcome.status == MatchStatus.MATCHED:
                break
            logger.info("Geocode strategy {} returned {}: {}", strategy.name, outcome.status, outcome.detail)
        return outcomes

    @staticmethod
    def _note_for(outcomes: list[StrategyOutcome]) -> str:
        if any(o.status == MatchStatus.AMBIGUOUS for o in outcomes):
            return NOTE_NO_MATCH
        return NOTE_NOT_GEOCODED
