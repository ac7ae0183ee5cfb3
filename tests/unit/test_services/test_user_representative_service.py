"""Tests for binding users to the representatives of their districts."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from outreach_api.core.config import Settings
from outreach_api.lib.officials import OfficialsConfigError
from outreach_api.models import User, UserAddress, UserRepresentative
from outreach_api.services import representative_sync_service
from outreach_api.services.user_representative_service import (
    MESSAGE_NO_MATCHES,
    MESSAGE_NO_STATE,
    assign_for_user,
    find_missing_slots,
    find_slot_representatives,
    infer_level_from_office,
    list_user_representatives,
    zip_to_state,
)


async def _bound_rep_ids(session: AsyncSession, user: User) -> set:
    result = await session.execute(select(UserRepresentative.rep_id).where(UserRepresentative.user_id == user.id))
    return set(result.scalars().all())


class TestHelpers:
    def test_zip_to_state_texas_only(self) -> None:
        assert zip_to_state("75201") == "TX"
        assert zip_to_state("79999-1234") == "TX"
        assert zip_to_state("30303") is None
        assert zip_to_state(None) is None

    @pytest.mark.parametrize(
        ("office", "expected"),
        [
            ("U.S. Senator", "federal"),
            ("United States House of Representatives", "federal"),
            ("President of the United States", "federal"),
            ("State Senator", "state"),
            ("Texas House District 12", "state"),
            ("Member, General Assembly", "state"),
            ("County Commissioner", "local"),
            (None, "local"),
        ],
    )
    def test_infer_level(self, office: str | None, expected: str) -> None:
        assert infer_level_from_office(office) == expected


class TestAssignForUser:
    @pytest.mark.asyncio
    async def test_no_state_is_refused(self, async_session: AsyncSession, sample_user: User, ga_directory) -> None:
        """A ZIP-only address outside the legacy range cannot be mapped."""
        async_session.add(UserAddress(user_id=sample_user.id, postal_code="30303", is_primary=True))
        await async_session.commit()

        result = await assign_for_user(async_session, sample_user.id)

        assert result.assigned_count == 0
        assert result.state is None
        assert result.message == MESSAGE_NO_STATE
        assert await _bound_rep_ids(async_session, sample_user) == set()

    @pytest.mark.asyncio
    async def test_no_address_is_refused(self, async_session: AsyncSession, sample_user: User) -> None:
        result = await assign_for_user(async_session, sample_user.id)
        assert result.message == MESSAGE_NO_STATE

    @pytest.mark.asyncio
    async def test_binds_every_district_slot(
        self, async_session: AsyncSession, sample_user: User, ga_address: UserAddress, ga_directory
    ) -> None:
        result = await assign_for_user(async_session, sample_user.id)

        assert result.assigned_count == 5
        assert result.state == "GA"
        assert result.message is None
        assert await _bound_rep_ids(async_session, sample_user) == {r.id for r in ga_directory.values()}

        levels = (
            await async_session.execute(
                select(UserRepresentative.level).where(UserRepresentative.user_id == sample_user.id)
            )
        ).scalars().all()
        assert sorted(levels) == ["federal", "federal", "federal", "state", "state"]

    @pytest.mark.asyncio
    async def test_rerun_replaces_bindings(
        self, async_session: AsyncSession, sample_user: User, ga_address: UserAddress, ga_directory
    ) -> None:
        """After moving house districts the old state representative is unbound."""
        await assign_for_user(async_session, sample_user.id)

        ga_address.hd = "59"
        await async_session.commit()
        result = await assign_for_user(async_session, sample_user.id)

        assert result.assigned_count == 4
        bound = await _bound_rep_ids(async_session, sample_user)
        assert ga_directory["state_rep"].id not in bound
        assert ga_directory["senator_a"].id in bound

    @pytest.mark.asyncio
    async def test_no_matches_clears_stale_bindings(
        self, async_session: AsyncSession, sample_user: User, ga_address: UserAddress, ga_directory
    ) -> None:
        """Moving to a state with no directory rows leaves the user with no bindings."""
        first = await assign_for_user(async_session, sample_user.id)
        assert first.assigned_count == 5

        ga_address.state = "WY"
        await async_session.commit()
        result = await assign_for_user(async_session, sample_user.id)

        assert result.assigned_count == 0
        assert result.state == "WY"
        assert result.message == MESSAGE_NO_MATCHES
        assert await _bound_rep_ids(async_session, sample_user) == set()

    @pytest.mark.asyncio
    async def test_state_cleared_after_mapping_removes_bindings(
        self, async_session: AsyncSession, sample_user: User, ga_address: UserAddress, ga_directory
    ) -> None:
        first = await assign_for_user(async_session, sample_user.id)
        assert first.assigned_count == 5

        ga_address.state = None
        await async_session.commit()
        result = await assign_for_user(async_session, sample_user.id)

        assert result.assigned_count == 0
        assert result.message == MESSAGE_NO_STATE
        assert await _bound_rep_ids(async_session, sample_user) == set()

    @pytest.mark.asyncio
    async def test_does_not_fall_back_to_whole_state(
        self, async_session: AsyncSession, sample_user: User, make_rep
    ) -> None:
        """Representatives of other districts in the same state are never bound."""
        async_session.add(UserAddress(user_id=sample_user.id, state="GA", cd="5", sd="36", is_primary=True))
        async_session.add_all(
            [
                make_rep(name="Other House", office_name="U.S. Representative", chamber="house", district="6"),
                make_rep(name="Other Senator", level="state", chamber="senate", district="40"),
            ]
        )
        await async_session.commit()

        result = await assign_for_user(async_session, sample_user.id)

        assert result.assigned_count == 0
        assert result.message == MESSAGE_NO_MATCHES

    @pytest.mark.asyncio
    async def test_texas_zip_fallback(self, async_session: AsyncSession, sample_user: User, make_rep) -> None:
        async_session.add(UserAddress(user_id=sample_user.id, postal_code="75201", is_primary=True))
        async_session.add(make_rep(name="Ted Cruz", state="TX"))
        await async_session.commit()

        result = await assign_for_user(async_session, sample_user.id)

        assert result.state == "TX"
        assert result.assigned_count == 1

    @pytest.mark.asyncio
    async def test_sync_failures_do_not_block_mapping(
        self,
        async_session: AsyncSession,
        settings: Settings,
        sample_user: User,
        ga_address: UserAddress,
        make_rep,
    ) -> None:
        """Missing slots trigger syncs; their errors are logged and mapping continues."""
        async_session.add(make_rep(name="Jon Ossoff"))
        await async_session.commit()

        with (
            patch.object(
                representative_sync_service,
                "run_federal_sync",
                AsyncMock(side_effect=OfficialsConfigError("CONGRESS_GOV_API_KEY missing")),
            ) as federal,
            patch.object(representative_sync_service, "run_state_sync", AsyncMock(return_value={})) as state,
        ):
            result = await assign_for_user(async_session, sample_user.id, settings)

        federal.assert_awaited_once_with(async_session, settings, "GA", "5")
        state.assert_awaited_once_with(async_session, settings, "GA", "36", "58")
        assert result.assigned_count == 1

    @pytest.mark.asyncio
    async def test_complete_directory_skips_sync(
        self,
        async_session: AsyncSession,
        settings: Settings,
        sample_user: User,
        ga_address: UserAddress,
        ga_directory,
    ) -> None:
        with (
            patch.object(representative_sync_service, "run_federal_sync", AsyncMock()) as federal,
            patch.object(representative_sync_service, "run_state_sync", AsyncMock()) as state,
        ):
            await assign_for_user(async_session, sample_user.id, settings)

        federal.assert_not_called()
        state.assert_not_called()


class TestSlotLookups:
    @pytest.mark.asyncio
    async def test_tolerates_upper_lower_and_office_titles(self, async_session: AsyncSession, make_rep) -> None:
        upper = make_rep(name="Upper Senator", level="state", chamber="upper", district="36")
        assembly = make_rep(
            name="Assembly Member", level="state", chamber=None, office_name="State Assembly Member", district="58"
        )
        async_session.add_all([upper, assembly])
        await async_session.commit()

        reps = await find_slot_representatives(async_session, "GA", sd="36", hd="58")

        assert {r.name for r in reps} == {"Upper Senator", "Assembly Member"}

    @pytest.mark.asyncio
    async def test_inactive_rows_excluded(self, async_session: AsyncSession, make_rep) -> None:
        async_session.add(make_rep(name="Retired", active=False))
        await async_session.commit()

        assert await find_slot_representatives(async_session, "GA") == []

    @pytest.mark.asyncio
    async def test_missing_slots(self, async_session: AsyncSession, make_rep) -> None:
        async_session.add(make_rep(name="Only Senator"))
        await async_session.commit()

        missing = await find_missing_slots(async_session, "GA", cd="5", sd="36")

        assert missing == {"federal": True, "state": True}

    @pytest.mark.asyncio
    async def test_no_missing_slots(self, async_session: AsyncSession, ga_directory) -> None:
        missing = await find_missing_slots(async_session, "GA", cd="5", sd="36", hd="58")
        assert missing == {"federal": False, "state": False}


class TestListUserRepresentatives:
    @pytest.mark.asyncio
    async def test_ordered_by_level_chamber_name(
        self, async_session: AsyncSession, sample_user: User, ga_address: UserAddress, ga_directory
    ) -> None:
        await assign_for_user(async_session, sample_user.id)

        reps = await list_user_representatives(async_session, sample_user.id)

        assert [r.name for r in reps] == [
            "Nikema Williams",
            "Jon Ossoff",
            "Raphael Warnock",
            "Park Cannon",
            "Nan Orrock",
        ]
