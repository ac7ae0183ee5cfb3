"""Tests for the address service: ZIP lock, single primary, district persistence."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from outreach_api.lib.geocoder.base import AT_LARGE
from outreach_api.models import User, UserAddress
from outreach_api.services.address_service import (
    ensure_primary_zip,
    get_primary_address,
    normalize_cd,
    normalize_legislative,
    normalize_zip,
    save_districts,
)


async def _primary_count(session: AsyncSession, user: User) -> int:
    result = await session.execute(
        select(func.count(UserAddress.id)).where(UserAddress.user_id == user.id, UserAddress.is_primary.is_(True))
    )
    return result.scalar_one()


class TestNormalizers:
    def test_zip_plus_four_accepted(self) -> None:
        assert normalize_zip(" 30303-1234 ") == "30303-1234"

    @pytest.mark.parametrize("value", ["3030", "abcde", "", "30303-12"])
    def test_bad_zip_rejected(self, value: str) -> None:
        with pytest.raises(ValueError, match="5-digit ZIP"):
            normalize_zip(value)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("05", "5"), ("0", AT_LARGE), ("at_large", AT_LARGE), ("At-Large", AT_LARGE), ("", None), (None, None)],
    )
    def test_normalize_cd(self, value: str | None, expected: str | None) -> None:
        assert normalize_cd(value) == expected

    @pytest.mark.parametrize(
        ("value", "expected"), [("05", "5"), (" 036 ", "36"), (7, "7"), ("A", "A"), ("", None), (None, None)]
    )
    def test_normalize_legislative(self, value: str | int | None, expected: str | None) -> None:
        assert normalize_legislative(value) == expected


class TestEnsurePrimaryZip:
    @pytest.mark.asyncio
    async def test_creates_primary_address(self, async_session: AsyncSession, sample_user: User) -> None:
        """First ZIP creates the primary address row."""
        address, locked = await ensure_primary_zip(async_session, sample_user.id, "30303")

        assert locked is False
        assert address.is_primary is True
        assert address.postal_code == "30303"
        assert await _primary_count(async_session, sample_user) == 1

    @pytest.mark.asyncio
    async def test_existing_zip_is_locked(self, async_session: AsyncSession, sample_user: User) -> None:
        """A second ZIP never replaces the first."""
        await ensure_primary_zip(async_session, sample_user.id, "30303")

        address, locked = await ensure_primary_zip(async_session, sample_user.id, "10001")

        assert locked is True
        assert address.postal_code == "30303"
        assert await _primary_count(async_session, sample_user) == 1

    @pytest.mark.asyncio
    async def test_fills_blank_zip_on_existing_row(self, async_session: AsyncSession, sample_user: User) -> None:
        async_session.add(UserAddress(user_id=sample_user.id, state="GA", is_primary=True))
        await async_session.commit()

        address, locked = await ensure_primary_zip(async_session, sample_user.id, "30303")

        assert locked is False
        assert address.postal_code == "30303"
        assert address.state == "GA"

    @pytest.mark.asyncio
    async def test_invalid_zip(self, async_session: AsyncSession, sample_user: User) -> None:
        with pytest.raises(ValueError):
            await ensure_primary_zip(async_session, sample_user.id, "303")
        assert await get_primary_address(async_session, sample_user.id) is None


class TestSaveDistricts:
    @pytest.mark.asyncio
    async def test_requires_two_letter_state(self, async_session: AsyncSession, sample_user: User) -> None:
        with pytest.raises(ValueError, match="two-letter state"):
            await save_districts(async_session, sample_user.id, state="Georgia")

    @pytest.mark.asyncio
    async def test_street_not_persisted_without_opt_in(
        self, async_session: AsyncSession, sample_user: User, ga_address: UserAddress
    ) -> None:
        ga_address.line1 = "1 Old St"
        ga_address.city = "Decatur"
        await async_session.commit()

        address = await save_districts(
            async_session,
            sample_user.id,
            state="ga",
            cd="6",
            sd="40",
            hd="80",
            line1="100 Peachtree St NW",
            city="Atlanta",
        )

        assert (address.state, address.cd, address.sd, address.hd) == ("GA", "6", "40", "80")
        assert address.line1 is None
        assert address.city is None
        assert address.id == ga_address.id

    @pytest.mark.asyncio
    async def test_street_persisted_with_opt_in(self, async_session: AsyncSession, sample_user: User) -> None:
        address = await save_districts(
            async_session,
            sample_user.id,
            state="GA",
            cd="5",
            postal_code="30303",
            persist_address=True,
            line1=" 100 Peachtree St NW ",
            city="Atlanta",
        )

        assert address.line1 == "100 Peachtree St NW"
        assert address.city == "Atlanta"
        assert address.postal_code == "30303"
        assert await _primary_count(async_session, sample_user) == 1

    @pytest.mark.asyncio
    async def test_locked_zip_not_overwritten(
        self, async_session: AsyncSession, sample_user: User, ga_address: UserAddress
    ) -> None:
        address = await save_districts(async_session, sample_user.id, state="GA", postal_code="30310")
        assert address.postal_code == "30303"

    @pytest.mark.asyncio
    async def test_at_large_district_stored_as_sentinel(self, async_session: AsyncSession, sample_user: User) -> None:
        address = await save_districts(async_session, sample_user.id, state="WY", cd="00")
        assert address.cd == AT_LARGE

    @pytest.mark.asyncio
    async def test_legislative_districts_stored_without_leading_zeros(
        self, async_session: AsyncSession, sample_user: User
    ) -> None:
        address = await save_districts(async_session, sample_user.id, state="GA", cd="05", sd="05", hd="007")
        assert (address.cd, address.sd, address.hd) == ("5", "5", "7")
