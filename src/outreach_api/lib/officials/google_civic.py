"""Google Civic Information provider (representatives by address).

The civic aggregator has no stable person id, so each official gets a
deterministic surrogate id of ``sha1(name|office|division)``.
"""

from __future__ import annotations

import hashlib
import re
from typing import Any

import httpx
from loguru import logger

from outreach_api.lib.geocoder.base import AT_LARGE
from outreach_api.lib.officials.base import BaseOfficialsProvider, OfficialRecord
from outreach_api.lib.officials.divisions import district_from_division, state_from_division
from outreach_api.lib.officials.transport import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
    get_json,
)

_BASE_URL = "https://civicinfo.googleapis.com/civicinfo/v2"

_US_FEDERAL_OFFICE = re.compile(r"president|vice|u\.?s\.?", re.IGNORECASE)
_US_SENATOR = re.compile(r"u\.?s\.?\s+senator", re.IGNORECASE)
_US_LEGISLATOR = re.compile(r"u\.?s\.?\s+(senator|representative)", re.IGNORECASE)


def surrogate_id(name: str, office_name: str, division: str) -> str:
    return hashlib.sha1(f"{name}|{office_name}|{division}".encode()).hexdigest()  # noqa: S324


def detect_level(division: str, office_name: str) -> str:
    """Classify an office as federal, state, or local from its division and title."""
    if re.search(r"/country:us$", division, re.IGNORECASE) and _US_FEDERAL_OFFICE.search(office_name):
        return "federal"
    if re.search(r"/cd:\d+", division):
        return "federal"
    if _US_LEGISLATOR.search(office_name):
        return "federal"
    if re.search(r"state:", division, re.IGNORECASE):
        return "state"
    return "local"


def detect_chamber(office_name: str, division: str) -> str | None:
    """Map an office title to "senate" or "house"; None for executive and other offices."""
    name = office_name.lower()
    in_state = re.search(r"state:", division, re.IGNORECASE) is not None
    if "senator" in name:
        return "senate" if (in_state or _US_SENATOR.search(office_name)) else None
    if any(word in name for word in ("representative", "assembly", "house", "delegate")):
        return "house"
    return None


class GoogleCivicProvider(BaseOfficialsProvider):
    """Fetches federal and state office holders for an address from Google Civic Information.

    Args:
        api_key: Google Civic Information API key.
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
            params={"key": api_key},
            timeout=timeout,
        )

    @property
    def provider_name(self) -> str:
        return "google_civic"

    async def fetch_by_address(self, address: str) -> list[OfficialRecord]:
        """Fetch country and state level office holders for an address or ZIP.

        Args:
            address: Free-text address or ZIP code.

        Returns:
            One record per (office, official) pair.
        """
        params = [
            ("address", address),
            ("includeOffices", "true"),
            ("levels", "country"),
            ("levels", "administrativeArea1"),
        ]
        data = await get_json(
            self._client,
            "/representatives",
            params,
            provider_name=self.provider_name,
            label="Google Civic",
            max_retries=self._max_retries,
            retry_delay=self._retry_delay,
        )
        return self._map_payload(data)

    def _map_payload(self, data: dict[str, Any]) -> list[OfficialRecord]:
        offices = data.get("offices") or []
        officials = data.get("officials") or []
        records: list[OfficialRecord] = []
        for office in offices:
            for index in office.get("officialIndices") or []:
                if not isinstance(index, int) or not 0 <= index < len(officials):
                    logger.warning("Google Civic office {!r} references missing official {}", office.get("name"), index)
                    continue
                record = self._map_official(office, officials[index])
                if record is not None:
                    records.append(record)
        return records

    def _map_official(self, office: dict[str, Any], official: dict[str, Any]) -> OfficialRecord | None:
        """Map one Civic (office, official) pair to an OfficialRecord."""
        name = official.get("name") or ""
        office_name = office.get("name") or ""
        division = office.get("divisionId") or ""
        if not name or not office_name:
            logger.warning("Skipping Google Civic official with missing name={!r} office={!r}", name, office_name)
            return None

        _, district = district_from_division(division)
        level = detect_level(division, office_name)
        chamber = detect_chamber(office_name, division)
        if level == "federal" and chamber == "house" and district is None:
            district = AT_LARGE
        channels = official.get("channels") or []
        twitter = next((c.get("id") for c in channels if c.get("type") == "Twitter"), None)
        facebook = next((c.get("id") for c in channels if c.get("type") == "Facebook"), None)

        emails = official.get("emails") or []
        urls = official.get("urls") or []
        phones = official.get("phones") or []
        email = emails[0] if emails else None
        website = urls[0] if urls else None

        return OfficialRecord(
            source_name=self.provider_name,
            external_id=surrogate_id(name, office_name, division),
            name=name,
            party=official.get("party"),
            photo_url=official.get("photoUrl"),
            office_name=office_name,
            level=level,
            chamber=chamber,
            state=state_from_division(division),
            district=district,
            division_id=division or None,
            email=email,
            contact_form_url=website if not email else None,
            phone=phones[0] if phones else None,
            website=website,
            twitter_handle=twitter.lstrip("@") if twitter else None,
            facebook_page_url=f"https://www.facebook.com/{facebook}" if facebook else None,
            raw_data={"office": office, "official": official},
        )
