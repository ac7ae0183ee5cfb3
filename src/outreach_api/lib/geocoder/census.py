"""US Census Bureau geocoder client for district lookups.

Uses the Census "Find Address Geographies" endpoints
(https://geocoding.geo.census.gov/geocoder/geographies/), which return the
matched address together with its congressional and state legislative
district layers in one call.
"""

from typing import Any

import httpx
from loguru import logger

from outreach_api.lib.geocoder.base import GeocodingProviderError, MatchStatus, StrategyOutcome

CENSUS_BASE_URL = "https://geocoding.geo.census.gov/geocoder/geographies"
DEFAULT_TIMEOUT = 10.0
DEFAULT_BENCHMARK = "Public_AR_Current"
DEFAULT_VINTAGE = "Current_Current"


class CensusDistrictClient:
    """Census geographies client.

    Args:
        timeout: Per-request timeout in seconds.
        base_url: Geographies endpoint root (overridable for tests).
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, base_url: str = CENSUS_BASE_URL) -> None:
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")

    @property
    def provider_name(self) -> str:
        return "census"

    async def structured(
        self,
        street: str,
        city: str | None = None,
        state: str | None = None,
        zip_code: str | None = None,
    ) -> dict[str, Any]:
        """Look up geographies with discrete address fields.

        Raises:
            GeocodingProviderError: On transport or service errors.
        """
        params = {"street": street}
        if city:
            params["city"] = city
        if state:
            params["state"] = state
        if zip_code:
            params["zip"] = zip_code
        return await self._get("address", params)

    async def one_line(self, address: str) -> dict[str, Any]:
        """Look up geographies with a single-line address.

        Raises:
            GeocodingProviderError: On transport or service errors.
        """
        return await self._get("onelineaddress", {"address": address})

    async def _get(self, endpoint: str, params: dict[str, str]) -> dict[str, Any]:
        query = {
            **params,
            "benchmark": DEFAULT_BENCHMARK,
            "vintage": DEFAULT_VINTAGE,
            "layers": "all",
            "format": "json",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(f"{self._base_url}/{endpoint}", params=query)
                response.raise_for_status()

            data = response.json()
        except httpx.TimeoutException as e:
            logger.warning("Census geographies timeout for address (redacted)")
            raise GeocodingProviderError("census", "Geocoding request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"Census geographies HTTP error {e.response.status_code}")
            raise GeocodingProviderError(
                "census", f"Provider returned HTTP {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.RequestError as e:
            logger.warning("Census geographies connection error")
            raise GeocodingProviderError("census", "Connection to geocoding provider failed") from e
        except ValueError as e:
            logger.warning("Census geographies returned non-JSON response")
            raise GeocodingProviderError("census", "Invalid JSON response") from e

        if not isinstance(data, dict):
            raise GeocodingProviderError("census", "Unexpected response shape")
        return data

    @staticmethod
    def parse_response(strategy: str, data: dict[str, Any]) -> StrategyOutcome:
        """Turn a geographies response into a tagged outcome.

        Zero address matches is AMBIGUOUS: the service answered but could not
        place the address.  A match without a geographies block is FAILED.
        """
        result = data.get("result") or {}
        matches = result.get("addressMatches") or []
        if not matches:
            return StrategyOutcome(strategy=strategy, status=MatchStatus.AMBIGUOUS, detail="no address match")

        best = matches[0]
        geographies = best.get("geographies")
        if not isinstance(geographies, dict):
            return StrategyOutcome(strategy=strategy, status=MatchStatus.FAILED, detail="match has no geographies")

        components = best.get("addressComponents") or {}
        state = components.get("state")
        return StrategyOutcome(
            strategy=strategy,
            status=MatchStatus.MATCHED,
            state=str(state).upper() if state else None,
            geographies=geographies,
        )
