"""Representative sync service: replace directory slots from upstream sources.

A slot is the (level, chamber, state, district) tuple a seat lives in.  Every
sync fetches all of its records first and only then writes, so an upstream
failure leaves the directory untouched.  Within a slot, rows for people who
are still in office keep their ids; rows for people who left are deleted.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from outreach_api.core.config import Settings
from outreach_api.lib.geocoder.base import AT_LARGE
from outreach_api.lib.officials import (
    BaseOfficialsProvider,
    CongressGovProvider,
    GoogleCivicProvider,
    OfficialRecord,
    OpenStatesProvider,
    get_provider,
)
from outreach_api.lib.officials.divisions import STATE_CODE_TO_NAME
from outreach_api.models.representative import Representative
from outreach_api.services.address_service import normalize_legislative

_sync_log = logger.bind(json_output=True, event="directory_sync")

Slot = tuple[str, str | None, str | None, str | None]


@dataclass
class SlotOutcome:
    """Counts from replacing one slot."""

    inserted: int = 0
    updated: int = 0
    deleted: int = 0

    @property
    def written(self) -> int:
        return self.inserted + self.updated


# ---------------------------------------------------------------------------
# Input normalization
# ---------------------------------------------------------------------------


def normalize_state(state: str | None) -> str:
    """Return an upper-case state code.

    Raises:
        ValueError: If ``state`` is not a known two-letter code.
    """
    code = (state or "").strip().upper()
    if code not in STATE_CODE_TO_NAME:
        msg = f"Unknown state code: {state!r}"
        raise ValueError(msg)
    return code


def normalize_house_district(district: str | int | None) -> str | None:
    """Bare district number, the at-large sentinel, or None.

    Raises:
        ValueError: If the value is neither numeric nor at-large.
    """
    if district is None:
        return None
    value = str(district).strip()
    if not value:
        return None
    if value.lower().replace("_", "-") in ("at-large", "atlarge", "at large", "al"):
        return AT_LARGE
    if not value.isdigit():
        msg = f"Invalid congressional district: {district!r}"
        raise ValueError(msg)
    return str(int(value)) if int(value) > 0 else AT_LARGE


# ---------------------------------------------------------------------------
# Slot replacement
# ---------------------------------------------------------------------------


def _apply_record(rep: Representative, record: OfficialRecord, synced_at: datetime) -> None:
    rep.external_id = record.external_id
    rep.source = record.source_name
    rep.name = record.name
    rep.party = record.party
    rep.photo_url = record.photo_url
    rep.office_name = record.office_name
    rep.level = record.level
    rep.chamber = record.chamber
    rep.state = record.state
    rep.district = record.district
    rep.division_id = record.division_id
    rep.email = record.email
    rep.contact_form_url = record.contact_form_url
    rep.phone = record.phone
    rep.website = record.website
    rep.twitter_handle = record.twitter_handle
    rep.facebook_page_url = record.facebook_page_url
    rep.active = True
    rep.last_synced = synced_at
    rep.raw_data = record.raw_data or None


def _slot_filter(slot: Slot) -> list:
    level, chamber, state, district = slot
    clauses = [Representative.level == level]
    for column, value in (
        (Representative.chamber, chamber),
        (Representative.state, state),
        (Representative.district, district),
    ):
        clauses.append(column.is_(None) if value is None else column == value)
    return clauses


async def replace_slot(session: AsyncSession, slot: Slot, records: list[OfficialRecord]) -> SlotOutcome:
    """Make ``records`` the complete contents of ``slot``.

    Does not commit.  Rows already in the slot whose ``external_id`` is not
    among ``records`` are deleted.  Records whose ``external_id`` exists
    anywhere in the directory update that row in place (moving it into the
    slot if needed); the rest are inserted.

    Args:
        session: Database session.
        slot: (level, chamber, state, district).
        records: Fresh records, all belonging to ``slot``.

    Returns:
        Insert/update/delete counts.
    """
    outcome = SlotOutcome()
    synced_at = datetime.now(UTC)
    keep_ids = {r.external_id for r in records if r.external_id}

    existing = (await session.execute(select(Representative).where(*_slot_filter(slot)))).scalars().all()
    stale_ids = [rep.id for rep in existing if rep.external_id is None or rep.external_id not in keep_ids]
    if stale_ids:
        await session.execute(delete(Representative).where(Representative.id.in_(stale_ids)))
        outcome.deleted = len(stale_ids)

    known: dict[str, Representative] = {}
    if keep_ids:
        result = await session.execute(select(Representative).where(Representative.external_id.in_(keep_ids)))
        known = {rep.external_id: rep for rep in result.scalars().all() if rep.external_id}

    for record in records:
        rep = known.get(record.external_id) if record.external_id else None
        if rep is None:
            rep = Representative()
            session.add(rep)
            outcome.inserted += 1
            if record.external_id:
                known[record.external_id] = rep
        else:
            outcome.updated += 1
        _apply_record(rep, record, synced_at)

    await session.flush()
    logger.debug(
        "Replaced slot {}: +{} ~{} -{}", slot, outcome.inserted, outcome.updated, outcome.deleted
    )
    return outcome


async def _replace_groups(session: AsyncSession, groups: dict[Slot, list[OfficialRecord]]) -> int:
    """Replace every non-empty group's slot; empty fetches leave the slot as is."""
    written = 0
    for slot, records in groups.items():
        if not records:
            logger.warning("Upstream returned no records for slot {}; keeping existing rows", slot)
            continue
        written += (await replace_slot(session, slot, records)).written
    return written


# ---------------------------------------------------------------------------
# Provider-driven syncs
# ---------------------------------------------------------------------------


async def sync_federal(
    session: AsyncSession,
    provider: CongressGovProvider,
    state: str,
    house_district: str | int | None = None,
) -> dict[str, int]:
    """Sync a state's U.S. senators and, optionally, one House seat.

    Args:
        session: Database session.
        provider: Congress.gov provider.
        state: Two-letter state code.
        house_district: District number, "At-Large", or None to skip the House.

    Returns:
        Dict with ``senate`` and ``house`` row counts.

    Raises:
        ValueError: On an unknown state or malformed district.
        OfficialsProviderError: On upstream failure (nothing is written).
    """
    state = normalize_state(state)
    district = normalize_house_district(house_district)

    senators = await provider.fetch_senators(state)
    house = await provider.fetch_house_member(state, district) if district else []

    counts = {
        "senate": await _replace_groups(session, {("federal", "senate", state, None): senators}),
        "house": 0,
    }
    if district:
        counts["house"] = await _replace_groups(session, {("federal", "house", state, district): house})
    await session.commit()
    _sync_log.info("Federal sync for {} (house district {}): {}", state, district, counts)
    return counts


async def sync_state(
    session: AsyncSession,
    provider: OpenStatesProvider,
    state: str,
    senate_district: str | int | None = None,
    house_district: str | int | None = None,
) -> dict[str, int]:
    """Sync the state legislators for the given upper and lower districts.

    Returns:
        Dict with ``senate`` and ``house`` counts (0 or 1 each).

    Raises:
        ValueError: On an unknown state.
        OfficialsProviderError: On upstream failure (nothing is written).
    """
    state = normalize_state(state)
    sd = normalize_legislative(senate_district)
    hd = normalize_legislative(house_district)

    senator = await provider.fetch_legislator(state, "upper", sd) if sd else None
    representative = await provider.fetch_legislator(state, "lower", hd) if hd else None

    counts = {"senate": 0, "house": 0}
    if sd:
        counts["senate"] = await _replace_groups(
            session, {("state", "senate", state, sd): [senator] if senator else []}
        )
    if hd:
        counts["house"] = await _replace_groups(
            session, {("state", "house", state, hd): [representative] if representative else []}
        )
    await session.commit()
    _sync_log.info("State sync for {} (sd={}, hd={}): {}", state, sd, hd, counts)
    return counts


async def sync_civic(session: AsyncSession, provider: GoogleCivicProvider, address: str) -> int:
    """Sync every office holder the aggregator returns for an address.

    Records are grouped by slot and each slot is replaced with its group.

    Returns:
        Number of rows written.
    """
    if not (address or "").strip():
        msg = "Address is required"
        raise ValueError(msg)
    records = await provider.fetch_by_address(address.strip())

    groups: dict[Slot, list[OfficialRecord]] = defaultdict(list)
    for record in records:
        groups[record.slot].append(record)

    written = await _replace_groups(session, groups)
    await session.commit()
    _sync_log.info("Civic sync wrote {} representatives across {} slots", written, len(groups))
    return written


# ---------------------------------------------------------------------------
# Settings-driven entry points
# ---------------------------------------------------------------------------


def _build_provider(name: str, api_key: str | None, settings: Settings) -> BaseOfficialsProvider:
    return get_provider(
        name,
        api_key=api_key,
        timeout=settings.upstream_timeout,
        max_retries=settings.upstream_max_retries,
        retry_delay=settings.upstream_retry_delay,
    )


async def run_federal_sync(
    session: AsyncSession,
    settings: Settings,
    state: str,
    house_district: str | int | None = None,
) -> dict[str, int]:
    """Build a Congress.gov provider from settings and run ``sync_federal``.

    Raises:
        OfficialsConfigError: If CONGRESS_GOV_API_KEY is not set.
    """
    provider = _build_provider("congress_gov", settings.congress_gov_api_key, settings)
    async with provider:
        return await sync_federal(session, provider, state, house_district)  # type: ignore[arg-type]


async def run_state_sync(
    session: AsyncSession,
    settings: Settings,
    state: str,
    senate_district: str | int | None = None,
    house_district: str | int | None = None,
) -> dict[str, int]:
    """Build an Open States provider from settings and run ``sync_state``.

    Raises:
        OfficialsConfigError: If OPEN_STATES_API_KEY is not set.
    """
    provider = _build_provider("open_states", settings.open_states_api_key, settings)
    async with provider:
        return await sync_state(session, provider, state, senate_district, house_district)  # type: ignore[arg-type]


async def run_civic_sync(session: AsyncSession, settings: Settings, address: str) -> int:
    """Build a Google Civic provider from settings and run ``sync_civic``.

    Raises:
        OfficialsConfigError: If GOOGLE_CIVIC_API_KEY is not set.
    """
    provider = _build_provider("google_civic", settings.google_civic_api_key, settings)
    async with provider:
        return await sync_civic(session, provider, address)  # type: ignore[arg-type]
