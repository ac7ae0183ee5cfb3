"""Congress.gov API v3 provider for U.S. senators and representatives."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
from loguru import logger

from outreach_api.lib.geocoder.base import AT_LARGE
from outreach_api.lib.officials.base import BaseOfficialsProvider, OfficialRecord, OfficialsProviderError
from outreach_api.lib.officials.divisions import division_id, to_state_code
from outreach_api.lib.officials.transport import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
    get_json,
)

_BASE_URL = "https://api.congress.gov/v3"

# Member list pages scanned when looking for a state's senators
_MAX_LIST_PAGES = 6
_PAGE_SIZE = 250

# Detail fetches in flight at once (a sync touches at most ~3 seats)
_DETAIL_CONCURRENCY = 3


def member_terms(member: dict[str, Any]) -> list[dict[str, Any]]:
    """Return a member's terms as a list.

    List responses wrap terms as ``{"item": [...]}``; detail responses use a
    bare list.
    """
    terms = member.get("terms")
    if isinstance(terms, dict):
        terms = terms.get("item")
    if not isinstance(terms, list):
        return []
    return [t for t in terms if isinstance(t, dict)]


def is_current_member(member: dict[str, Any]) -> bool:
    """Best-effort check that a member is currently serving.

    Uses the explicit ``currentMember`` flag when present; otherwise treats a
    latest term with a missing or blank ``endYear`` as current.
    """
    flag = member.get("currentMember")
    if isinstance(flag, bool):
        return flag
    terms = member_terms(member)
    if not terms:
        return False
    end_year = terms[-1].get("endYear")
    return end_year is None or str(end_year).strip() == ""


def is_senator(member: dict[str, Any]) -> bool:
    """True when the member's latest term is in the Senate.

    Members without term data are treated as senators when they have no
    district.
    """
    terms = member_terms(member)
    if terms:
        return "senate" in str(terms[-1].get("chamber") or "").lower()
    return member.get("district") is None


def direct_order_name(name: str) -> str:
    """Turn "Last, First M." into "First M. Last"."""
    if "," not in name:
        return name.strip()
    last, _, first = name.partition(",")
    return f"{first.strip()} {last.strip()}".strip()


class CongressGovProvider(BaseOfficialsProvider):
    """Fetches federal legislators from Congress.gov API v3.

    Args:
        api_key: Congress.gov API key.
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
            params={"api_key": api_key, "format": "json"},
            headers={"Accept": "application/json"},
            timeout=timeout,
        )

    @property
    def provider_name(self) -> str:
        return "congress_gov"

    async def fetch_senators(self, state: str) -> list[OfficialRecord]:
        """Fetch the currently serving U.S. senators for a state.

        Args:
            state: Two-letter state code.

        Returns:
            Senator records (normally two).
        """
        members = await self._fetch_state_members(state)
        senators = [m for m in members if is_current_member(m) and is_senator(m)]
        if len(senators) != 2:
            logger.warning("Congress.gov returned {} current senators for {}", len(senators), state)
        details = await self._fetch_details(senators)
        records = [self._map_member(m, d, "senate", state) for m, d in zip(senators, details, strict=True)]
        return [r for r in records if r is not None]

    async def fetch_house_member(self, state: str, district: str) -> list[OfficialRecord]:
        """Fetch the current U.S. representative for a state's district.

        Args:
            state: Two-letter state code.
            district: District number or the at-large sentinel.

        Returns:
            Zero or one representative record.
        """
        upstream_district = "0" if district == AT_LARGE else district
        data = await self._request(f"/member/{state}/{upstream_district}", {"currentMember": "true"})
        members: list[dict[str, Any]] = data.get("members") or []
        current = [m for m in members if is_current_member(m) and not is_senator(m)]
        if not current:
            logger.warning("Congress.gov returned no current House member for {}-{}", state, district)
            return []
        # The endpoint lists past holders too; the first current one is the seat holder
        member = current[0]
        details = await self._fetch_details([member])
        record = self._map_member(member, details[0], "house", state, district)
        return [record] if record is not None else []

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _fetch_state_members(self, state: str) -> list[dict[str, Any]]:
        """Page through ``/member/{state}`` collecting current members."""
        members: list[dict[str, Any]] = []
        for page in range(_MAX_LIST_PAGES):
            data = await self._request(
                f"/member/{state}",
                {"currentMember": "true", "limit": _PAGE_SIZE, "offset": page * _PAGE_SIZE},
            )
            members.extend(data.get("members") or [])
            if not (data.get("pagination") or {}).get("next"):
                break
        return members

    async def _fetch_details(self, members: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Fetch member details concurrently; a failed fetch yields an empty dict."""
        semaphore = asyncio.Semaphore(_DETAIL_CONCURRENCY)

        async def fetch_one(member: dict[str, Any]) -> dict[str, Any]:
            bioguide_id = member.get("bioguideId")
            if not bioguide_id:
                return {}
            async with semaphore:
                try:
                    return await self._fetch_member_detail(bioguide_id)
                except OfficialsProviderError as exc:
                    logger.warning("Congress.gov detail fetch failed for {}: {}", bioguide_id, exc.message)
                    return {}

        return list(await asyncio.gather(*(fetch_one(m) for m in members)))

    async def _fetch_member_detail(self, bioguide_id: str) -> dict[str, Any]:
        """Fetch detailed member info by bioguide ID."""
        data = await self._request(f"/member/{bioguide_id}")
        member: dict[str, Any] = data.get("member") or {}
        return member

    async def _request(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Make an authenticated GET request to the Congress.gov API."""
        return await get_json(
            self._client,
            path,
            params,
            provider_name=self.provider_name,
            label="Congress.gov",
            max_retries=self._max_retries,
            retry_delay=self._retry_delay,
        )

    def _map_member(
        self,
        summary: dict[str, Any],
        detail: dict[str, Any],
        chamber: str,
        state: str,
        district: str | None = None,
    ) -> OfficialRecord | None:
        """Map Congress.gov member data to an OfficialRecord.

        Returns None and logs a warning if the member is missing a bioguideId
        or name.

        Args:
            summary: Member data from the list endpoint.
            detail: Member data from the detail endpoint (may be empty).
            chamber: "senate" or "house".
            state: Requested two-letter state code.
            district: House district (number or at-large sentinel).
        """
        bioguide_id = detail.get("bioguideId") or summary.get("bioguideId") or ""
        full_name = detail.get("directOrderName") or direct_order_name(summary.get("name") or "")
        if not bioguide_id or not full_name:
            logger.warning(
                "Skipping Congress.gov member with missing bioguideId={!r} or name={!r}",
                bioguide_id,
                full_name,
            )
            return None

        state_code = to_state_code(detail.get("stateCode") or summary.get("state")) or state

        if chamber == "senate":
            office_name = "U.S. Senator"
            seat_district = None
            division = division_id(state_code)
        else:
            office_name = "U.S. Representative"
            seat_district = district
            if seat_district == AT_LARGE:
                division = division_id(state_code)
            else:
                division = division_id(state_code, "cd", seat_district)

        party_history = detail.get("partyHistory") or []
        party = summary.get("partyName") or (party_history[-1].get("partyName") if party_history else None)

        depiction = detail.get("depiction") or summary.get("depiction") or {}
        website = detail.get("officialWebsiteUrl")
        address_info = detail.get("addressInformation") or {}

        return OfficialRecord(
            source_name=self.provider_name,
            external_id=bioguide_id,
            name=full_name,
            party=party,
            photo_url=depiction.get("imageUrl"),
            office_name=office_name,
            level="federal",
            chamber=chamber,
            state=state_code,
            district=seat_district,
            division_id=division,
            # Congress.gov publishes no email; the official site hosts the contact form
            contact_form_url=website,
            website=website,
            phone=address_info.get("phoneNumber"),
            raw_data={"summary": summary, "detail": detail},
        )
