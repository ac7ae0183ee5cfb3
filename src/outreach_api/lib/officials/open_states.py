"""Open States API v3 provider for state legislators."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from outreach_api.lib.officials.base import BaseOfficialsProvider, OfficialRecord, OfficialsProviderError
from outreach_api.lib.officials.divisions import division_id, state_name
from outreach_api.lib.officials.transport import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
    get_json,
)

_BASE_URL = "https://v3.openstates.org"

# Open States org_classification -> (our chamber, office title, OCD division kind)
_ORG_CHAMBERS: dict[str, tuple[str, str, str]] = {
    "upper": ("senate", "State Senator", "sldu"),
    "lower": ("house", "State Representative", "sldl"),
}


def _first_non_empty(*values: Any) -> str | None:
    for value in values:
        if value and str(value).strip():
            return str(value).strip()
    return None


class OpenStatesProvider(BaseOfficialsProvider):
    """Fetches state legislator data from Open States API v3.

    Args:
        api_key: Open States API key.
        timeout: Request timeout in seconds.
        max_retries: Retries on transient failures.
        retry_delay: Fixed delay between retries.
    """

    def __init__(
        self,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ) -> None:
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._client = httpx.AsyncClient(
            base_url=_BASE_URL,
            headers={"X-API-KEY": api_key},
            timeout=timeout,
        )

    @property
    def provider_name(self) -> str:
        return "open_states"

    async def fetch_legislator(self, state: str, org_classification: str, district: str) -> OfficialRecord | None:
        """Fetch the legislator holding one state legislative seat.

        Args:
            state: Two-letter state code.
            org_classification: "upper" (senate) or "lower" (house).
            district: District number.

        Returns:
            The seat holder, or None when Open States has no match.

        Raises:
            OfficialsProviderError: On unsupported input or upstream failure.
        """
        if org_classification not in _ORG_CHAMBERS:
            msg = f"Unsupported chamber for Open States: {org_classification}"
            raise OfficialsProviderError(self.provider_name, msg)
        jurisdiction = state_name(state)
        if jurisdiction is None:
            msg = f"Unsupported state code: {state}"
            raise OfficialsProviderError(self.provider_name, msg)

        params: dict[str, str | int] = {
            "jurisdiction": jurisdiction,
            "org_classification": org_classification,
            "district": district,
            "include": "offices",
            "per_page": 10,
        }
        data = await self._request("/people", params)
        results = data.get("results") or []
        records = [r for p in results if (r := self._map_person(p, state, org_classification, district)) is not None]
        if len(records) > 1:
            logger.warning(
                "Open States returned {} people for {} {} district {}; keeping the first",
                len(records),
                state,
                org_classification,
                district,
            )
        return records[0] if records else None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        """Make an authenticated GET request to the Open States API."""
        return await get_json(
            self._client,
            path,
            params,
            provider_name=self.provider_name,
            label="Open States",
            max_retries=self._max_retries,
            retry_delay=self._retry_delay,
        )

    def _map_person(
        self,
        person: dict[str, Any],
        state: str,
        org_classification: str,
        district: str,
    ) -> OfficialRecord | None:
        """Map an Open States person object to an OfficialRecord.

        Returns None and logs a warning if the person is missing an id or name.
        """
        source_id = person.get("id") or ""
        full_name = person.get("name") or ""
        if not source_id or not full_name:
            logger.warning(
                "Skipping Open States person with missing id={!r} or name={!r}",
                source_id,
                full_name,
            )
            return None

        chamber, office_name, division_kind = _ORG_CHAMBERS[org_classification]
        offices = [o for o in person.get("offices") or [] if isinstance(o, dict)]
        links = [link for link in person.get("links") or [] if isinstance(link, dict)]

        return OfficialRecord(
            source_name=self.provider_name,
            external_id=source_id,
            name=full_name,
            party=person.get("party"),
            photo_url=person.get("image"),
            office_name=office_name,
            level="state",
            chamber=chamber,
            state=state.upper(),
            district=district,
            division_id=division_id(state, division_kind, district),
            email=_first_non_empty(person.get("email"), *(o.get("email") for o in offices)),
            phone=_first_non_empty(*(o.get("voice") for o in offices)),
            website=links[0].get("url") if links else None,
            raw_data=person,
        )
