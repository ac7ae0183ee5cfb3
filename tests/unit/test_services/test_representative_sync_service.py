"""Tests for the representative sync service: slot replacement and provider syncs."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from outreach_api.lib.geocoder.base import AT_LARGE
from outreach_api.lib.officials import (
    CongressGovProvider,
    GoogleCivicProvider,
    OfficialRecord,
    OfficialsProviderError,
    OpenStatesProvider,
)
from outreach_api.models import Representative
from outreach_api.services.representative_sync_service import (
    normalize_house_district,
    normalize_state,
    replace_slot,
    sync_civic,
    sync_federal,
    sync_state,
)


def _senator(external_id: str, name: str, state: str = "GA") -> OfficialRecord:
    return OfficialRecord(
        source_name="congress_gov",
        external_id=external_id,
        name=name,
        office_name="U.S. Senator",
        level="federal",
        chamber="senate",
        state=state,
        contact_form_url=f"https://{external_id.lower()}.senate.gov",
    )


def _house(external_id: str, name: str, district: str, state: str = "GA") -> OfficialRecord:
    return OfficialRecord(
        source_name="congress_gov",
        external_id=external_id,
        name=name,
        office_name="U.S. Representative",
        level="federal",
        chamber="house",
        state=state,
        district=district,
    )


def _legislator(external_id: str, name: str, chamber: str, district: str) -> OfficialRecord:
    return OfficialRecord(
        source_name="open_states",
        external_id=external_id,
        name=name,
        office_name="State Senator" if chamber == "senate" else "State Representative",
        level="state",
        chamber=chamber,
        state="GA",
        district=district,
        email=f"{name.split()[-1].lower()}@legis.ga.gov",
    )


def _congress(senators: list[OfficialRecord], house: list[OfficialRecord] | None = None) -> MagicMock:
    provider = MagicMock(spec=CongressGovProvider)
    provider.fetch_senators = AsyncMock(return_value=senators)
    provider.fetch_house_member = AsyncMock(return_value=house or [])
    return provider


async def _slot_rows(session: AsyncSession, chamber: str, level: str = "federal") -> list[Representative]:
    result = await session.execute(
        select(Representative)
        .where(Representative.level == level, Representative.chamber == chamber)
        .order_by(Representative.external_id)
    )
    return list(result.scalars().all())


class TestNormalization:
    def test_state(self) -> None:
        assert normalize_state(" ga ") == "GA"
        with pytest.raises(ValueError, match="Unknown state code"):
            normalize_state("ZZ")

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("05", "5"), (7, "7"), ("0", AT_LARGE), ("AL", AT_LARGE), ("at-large", AT_LARGE), (None, None), ("", None)],
    )
    def test_house_district(self, value: object, expected: str | None) -> None:
        assert normalize_house_district(value) == expected

    def test_bad_house_district(self) -> None:
        with pytest.raises(ValueError, match="Invalid congressional district"):
            normalize_house_district("fifth")


class TestReplaceSlot:
    @pytest.mark.asyncio
    async def test_deletes_rows_missing_from_fresh_records(self, async_session: AsyncSession, make_rep) -> None:
        """Rows in the slot that upstream no longer reports are removed."""
        keep = make_rep(external_id="O000174", name="Jon Ossoff")
        gone = make_rep(external_id="I000055", name="Johnny Isakson")
        orphan = make_rep(external_id=None, name="Manual Entry")
        other_state = make_rep(external_id="C000127", name="Maria Cantwell", state="WA")
        async_session.add_all([keep, gone, orphan, other_state])
        await async_session.commit()

        slot = ("federal", "senate", "GA", None)
        outcome = await replace_slot(
            async_session, slot, [_senator("O000174", "Jon Ossoff"), _senator("W000790", "Raphael Warnock")]
        )
        await async_session.commit()

        assert (outcome.inserted, outcome.updated, outcome.deleted) == (1, 1, 2)
        rows = await _slot_rows(async_session, "senate")
        assert sorted(r.external_id for r in rows) == ["C000127", "O000174", "W000790"]
        assert next(r for r in rows if r.external_id == "O000174").id == keep.id

    @pytest.mark.asyncio
    async def test_moves_known_person_into_slot(self, async_session: AsyncSession, make_rep) -> None:
        """A member whose district changed keeps their row id."""
        rep = make_rep(external_id="W000788", name="Nikema Williams", chamber="house", district="4")
        async_session.add(rep)
        await async_session.commit()

        outcome = await replace_slot(
            async_session, ("federal", "house", "GA", "5"), [_house("W000788", "Nikema Williams", "5")]
        )
        await async_session.commit()

        assert outcome.updated == 1
        await async_session.refresh(rep)
        assert rep.district == "5"


class TestSyncFederal:
    @pytest.mark.asyncio
    async def test_repeated_sync_is_idempotent(self, async_session: AsyncSession) -> None:
        """Two identical syncs leave exactly two senators and one House member with stable ids."""
        provider = _congress(
            [_senator("O000174", "Jon Ossoff"), _senator("W000790", "Raphael Warnock")],
            [_house("W000788", "Nikema Williams", "5")],
        )

        first = await sync_federal(async_session, provider, "ga", "05")
        first_ids = {r.external_id: r.id for r in await _slot_rows(async_session, "senate")}
        second = await sync_federal(async_session, provider, "GA", "5")

        assert first == second == {"senate": 2, "house": 1}
        senators = await _slot_rows(async_session, "senate")
        house = await _slot_rows(async_session, "house")
        assert len(senators) == 2
        assert len(house) == 1
        assert {r.external_id: r.id for r in senators} == first_ids
        provider.fetch_house_member.assert_awaited_with("GA", "5")

    @pytest.mark.asyncio
    async def test_stale_senator_replaced(self, async_session: AsyncSession) -> None:
        old = _congress([_senator("O000174", "Jon Ossoff"), _senator("L000577", "Kelly Loeffler")])
        new = _congress([_senator("O000174", "Jon Ossoff"), _senator("W000790", "Raphael Warnock")])

        await sync_federal(async_session, old, "GA")
        await sync_federal(async_session, new, "GA")

        senators = await _slot_rows(async_session, "senate")
        assert [r.external_id for r in senators] == ["O000174", "W000790"]

    @pytest.mark.asyncio
    async def test_at_large_house_seat(self, async_session: AsyncSession) -> None:
        provider = _congress([], [_house("H001096", "Harriet Hageman", AT_LARGE, state="WY")])

        counts = await sync_federal(async_session, provider, "WY", "At-Large")

        assert counts == {"senate": 0, "house": 1}
        provider.fetch_house_member.assert_awaited_once_with("WY", AT_LARGE)
        house = await _slot_rows(async_session, "house")
        assert house[0].district == AT_LARGE

    @pytest.mark.asyncio
    async def test_upstream_failure_writes_nothing(self, async_session: AsyncSession, ga_directory) -> None:
        """An error while fetching leaves the existing slot rows untouched."""
        provider = _congress([_senator("NEW00001", "Someone New")])
        provider.fetch_house_member = AsyncMock(side_effect=OfficialsProviderError("congress_gov", "HTTP 500"))

        with pytest.raises(OfficialsProviderError):
            await sync_federal(async_session, provider, "GA", "5")

        senators = await _slot_rows(async_session, "senate")
        assert sorted(r.external_id for r in senators) == ["O000174", "W000790"]

    @pytest.mark.asyncio
    async def test_empty_fetch_keeps_slot(self, async_session: AsyncSession, ga_directory) -> None:
        counts = await sync_federal(async_session, _congress([]), "GA")

        assert counts == {"senate": 0, "house": 0}
        assert len(await _slot_rows(async_session, "senate")) == 2

    @pytest.mark.asyncio
    async def test_unknown_state(self, async_session: AsyncSession) -> None:
        provider = _congress([])
        with pytest.raises(ValueError):
            await sync_federal(async_session, provider, "XX")
        provider.fetch_senators.assert_not_called()


class TestSyncState:
    @pytest.mark.asyncio
    async def test_upper_and_lower(self, async_session: AsyncSession) -> None:
        provider = MagicMock(spec=OpenStatesProvider)
        provider.fetch_legislator = AsyncMock(
            side_effect=[
                _legislator("ocd-person/sd36", "Nan Orrock", "senate", "36"),
                _legislator("ocd-person/hd58", "Park Cannon", "house", "58"),
            ]
        )

        counts = await sync_state(async_session, provider, "GA", "036", "58")

        assert counts == {"senate": 1, "house": 1}
        assert provider.fetch_legislator.await_args_list[0].args == ("GA", "upper", "36")
        assert provider.fetch_legislator.await_args_list[1].args == ("GA", "lower", "58")
        state_senate = await _slot_rows(async_session, "senate", level="state")
        assert state_senate[0].district == "36"
        assert state_senate[0].email == "orrock@legis.ga.gov"

    @pytest.mark.asyncio
    async def test_missing_legislator_keeps_slot(self, async_session: AsyncSession, ga_directory) -> None:
        provider = MagicMock(spec=OpenStatesProvider)
        provider.fetch_legislator = AsyncMock(return_value=None)

        counts = await sync_state(async_session, provider, "GA", None, "58")

        assert counts == {"senate": 0, "house": 0}
        assert len(await _slot_rows(async_session, "house", level="state")) == 1


class TestSyncCivic:
    @pytest.mark.asyncio
    async def test_groups_by_slot(self, async_session: AsyncSession) -> None:
        provider = MagicMock(spec=GoogleCivicProvider)
        provider.fetch_by_address = AsyncMock(
            return_value=[
                _senator("civic-a", "Jon Ossoff"),
                _senator("civic-b", "Raphael Warnock"),
                _house("civic-c", "Nikema Williams", "5"),
                _legislator("civic-d", "Nan Orrock", "senate", "36"),
            ]
        )

        written = await sync_civic(async_session, provider, " 30303 ")

        assert written == 4
        provider.fetch_by_address.assert_awaited_once_with("30303")
        assert len(await _slot_rows(async_session, "senate")) == 2

    @pytest.mark.asyncio
    async def test_address_required(self, async_session: AsyncSession) -> None:
        provider = MagicMock(spec=GoogleCivicProvider)
        with pytest.raises(ValueError, match="Address is required"):
            await sync_civic(async_session, provider, "  ")
