"""Unit tests for the Congress.gov provider."""

from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from outreach_api.lib.geocoder.base import AT_LARGE
from outreach_api.lib.officials.base import OfficialsProviderError
from outreach_api.lib.officials.congress_gov import (
    CongressGovProvider,
    direct_order_name,
    is_current_member,
    is_senator,
)

_BASE = "https://api.congress.gov/v3"


def _member(bioguide_id: str, name: str, chamber: str, district: int | None = None, **extra: Any) -> dict:
    member = {
        "bioguideId": bioguide_id,
        "name": name,
        "partyName": "Democratic",
        "state": "Georgia",
        "terms": {"item": [{"chamber": chamber, "startYear": 2021}]},
        "depiction": {"imageUrl": f"https://www.congress.gov/img/member/{bioguide_id.lower()}.jpg"},
    }
    if district is not None:
        member["district"] = district
    member.update(extra)
    return member


def _detail(bioguide_id: str, direct_name: str) -> dict:
    return {
        "member": {
            "bioguideId": bioguide_id,
            "directOrderName": direct_name,
            "stateCode": "GA",
            "officialWebsiteUrl": f"https://{bioguide_id.lower()}.senate.gov",
            "addressInformation": {"phoneNumber": "(202) 224-3521"},
        }
    }


def _router(routes: dict[str, Any]) -> AsyncMock:
    """AsyncMock standing in for ``client.get`` that answers by request path."""

    async def _get(path: str, params: Any = None) -> httpx.Response:
        payload = routes[path]
        if isinstance(payload, httpx.Response):
            return payload
        return httpx.Response(200, json=payload, request=httpx.Request("GET", f"{_BASE}{path}"))

    return AsyncMock(side_effect=_get)


class TestMemberHelpers:
    def test_direct_order_name(self) -> None:
        assert direct_order_name("Ossoff, Jon") == "Jon Ossoff"
        assert direct_order_name("Jon Ossoff") == "Jon Ossoff"

    def test_current_flag_wins(self) -> None:
        assert is_current_member({"currentMember": False, "terms": {"item": [{"startYear": 2021}]}}) is False

    def test_open_latest_term_is_current(self) -> None:
        member = {"terms": {"item": [{"startYear": 2015, "endYear": 2021}, {"startYear": 2021}]}}
        assert is_current_member(member) is True

    def test_closed_latest_term_is_not_current(self) -> None:
        member = {"terms": [{"startYear": 2015, "endYear": 2021}]}
        assert is_current_member(member) is False

    def test_is_senator_from_latest_term(self) -> None:
        member = {"terms": {"item": [{"chamber": "House of Representatives"}, {"chamber": "Senate"}]}}
        assert is_senator(member) is True


class TestFetchSenators:
    @pytest.mark.asyncio
    async def test_returns_current_senators(self) -> None:
        provider = CongressGovProvider(api_key="test-key", retry_delay=0)
        members = {
            "members": [
                _member("O000174", "Ossoff, Jon", "Senate"),
                _member("W000790", "Warnock, Raphael G.", "Senate"),
                _member("W000788", "Williams, Nikema", "House of Representatives", district=5),
                _member("I000055", "Isakson, Johnny", "Senate", currentMember=False),
            ],
            "pagination": {"count": 4},
        }
        routes = {
            "/member/GA": members,
            "/member/O000174": _detail("O000174", "Jon Ossoff"),
            "/member/W000790": _detail("W000790", "Raphael G. Warnock"),
        }
        with patch.object(provider._client, "get", _router(routes)):
            records = await provider.fetch_senators("GA")

        assert sorted(r.external_id for r in records) == ["O000174", "W000790"]
        ossoff = next(r for r in records if r.external_id == "O000174")
        assert ossoff.name == "Jon Ossoff"
        assert ossoff.chamber == "senate"
        assert ossoff.level == "federal"
        assert ossoff.district is None
        assert ossoff.state == "GA"
        assert ossoff.office_name == "U.S. Senator"
        assert ossoff.division_id == "ocd-division/country:us/state:ga"
        assert ossoff.contact_form_url == "https://o000174.senate.gov"
        assert ossoff.email is None

    @pytest.mark.asyncio
    async def test_failed_detail_falls_back_to_summary(self) -> None:
        provider = CongressGovProvider(api_key="test-key", max_retries=0, retry_delay=0)
        routes = {
            "/member/GA": {"members": [_member("O000174", "Ossoff, Jon", "Senate")]},
            "/member/O000174": httpx.Response(
                404, json={}, request=httpx.Request("GET", f"{_BASE}/member/O000174")
            ),
        }
        with patch.object(provider._client, "get", _router(routes)):
            records = await provider.fetch_senators("GA")

        assert len(records) == 1
        assert records[0].name == "Jon Ossoff"
        assert records[0].website is None


class TestFetchHouseMember:
    @pytest.mark.asyncio
    async def test_numbered_district(self) -> None:
        provider = CongressGovProvider(api_key="test-key", retry_delay=0)
        routes = {
            "/member/GA/5": {"members": [_member("W000788", "Williams, Nikema", "House of Representatives", 5)]},
            "/member/W000788": _detail("W000788", "Nikema Williams"),
        }
        with patch.object(provider._client, "get", _router(routes)):
            records = await provider.fetch_house_member("GA", "5")

        assert len(records) == 1
        record = records[0]
        assert record.chamber == "house"
        assert record.district == "5"
        assert record.division_id == "ocd-division/country:us/state:ga/cd:5"

    @pytest.mark.asyncio
    async def test_at_large_queries_district_zero(self) -> None:
        provider = CongressGovProvider(api_key="test-key", retry_delay=0)
        routes = {
            "/member/WY/0": {"members": [_member("H001096", "Hageman, Harriet M.", "House of Representatives")]},
            "/member/H001096": {"member": {"bioguideId": "H001096", "stateCode": "WY"}},
        }
        mock_get = _router(routes)
        with patch.object(provider._client, "get", mock_get):
            records = await provider.fetch_house_member("WY", AT_LARGE)

        assert mock_get.call_args_list[0].args[0] == "/member/WY/0"
        assert records[0].district == AT_LARGE
        assert records[0].division_id == "ocd-division/country:us/state:wy"
        assert records[0].name == "Harriet M. Hageman"

    @pytest.mark.asyncio
    async def test_no_current_member(self) -> None:
        provider = CongressGovProvider(api_key="test-key", retry_delay=0)
        routes = {"/member/GA/5": {"members": []}}
        with patch.object(provider._client, "get", _router(routes)):
            assert await provider.fetch_house_member("GA", "5") == []

    @pytest.mark.asyncio
    async def test_list_error_propagates(self) -> None:
        provider = CongressGovProvider(api_key="test-key", max_retries=0, retry_delay=0)
        routes = {
            "/member/GA/5": httpx.Response(401, json={}, request=httpx.Request("GET", f"{_BASE}/member/GA/5")),
        }
        with (
            patch.object(provider._client, "get", _router(routes)),
            pytest.raises(OfficialsProviderError) as exc_info,
        ):
            await provider.fetch_house_member("GA", "5")

        assert exc_info.value.status_code == 401
        assert exc_info.value.provider_name == "congress_gov"
