"""User-representative service: bind a user to the representatives of their districts."""

import re
import uuid
from dataclasses import dataclass

from loguru import logger
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from outreach_api.core.config import Settings
from outreach_api.lib.officials import OfficialsConfigError, OfficialsProviderError
from outreach_api.models.representative import Representative
from outreach_api.models.user_representative import UserRepresentative
from outreach_api.services import address_service, representative_sync_service

MESSAGE_NO_STATE = "No state on file (ZIP-only mapping unsupported for this state)."
MESSAGE_NO_MATCHES = "No representatives found for your districts. Re-run district detection and try again."

_FEDERAL_MARKERS = (
    "us senate",
    "u s senate",
    "us senator",
    "u s senator",
    "us house",
    "u s house",
    "us representative",
    "u s representative",
    "president",
    "white house",
)
_UNITED_STATES_CHAMBER_WORDS = ("senate", "senator", "house", "representative", "congress")
_STATE_MARKERS = (
    "state senator",
    "state senate",
    "state representative",
    "state house",
    "state assembly",
    "general assembly",
    "legislature",
    "texas senate",
    "texas house",
)


@dataclass
class AssignmentResult:
    """Outcome of one mapping run."""

    assigned_count: int
    state: str | None
    message: str | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def zip_to_state(postal_code: str | None) -> str | None:
    """Legacy ZIP-range state lookup; only Texas (75000-79999) is recognized."""
    five = (postal_code or "").strip()[:5]
    if not re.fullmatch(r"\d{5}", five):
        return None
    if 75000 <= int(five) <= 79999:
        return "TX"
    return None


def infer_level_from_office(office: str | None) -> str:
    """Guess federal/state/local from an office title."""
    text = re.sub(r"\s+", " ", re.sub(r"[^a-z0-9]+", " ", (office or "").lower())).strip()
    if "united states" in text and any(w in text for w in _UNITED_STATES_CHAMBER_WORDS):
        return "federal"
    if any(m in text for m in _FEDERAL_MARKERS):
        return "federal"
    if any(m in text for m in _STATE_MARKERS):
        return "state"
    return "local"


def _senate_chamber():
    return or_(
        Representative.chamber.in_(("senate", "upper")),
        Representative.office_name.ilike("%senat%"),
    )


def _house_chamber():
    return or_(
        Representative.chamber.in_(("house", "lower")),
        Representative.office_name.ilike("%representative%"),
        Representative.office_name.ilike("%house%"),
        Representative.office_name.ilike("%assembly%"),
    )


async def _select_slot(session: AsyncSession, *clauses) -> list[Representative]:
    result = await session.execute(select(Representative).where(Representative.active.is_(True), *clauses))
    return list(result.scalars().all())


async def _count(session: AsyncSession, *clauses) -> int:
    query = select(func.count(Representative.id)).where(Representative.active.is_(True), *clauses)
    return (await session.execute(query)).scalar_one()


# ---------------------------------------------------------------------------
# Slot lookups
# ---------------------------------------------------------------------------


async def find_slot_representatives(
    session: AsyncSession,
    state: str,
    cd: str | None = None,
    sd: str | None = None,
    hd: str | None = None,
) -> list[Representative]:
    """Collect the representatives for a state and its districts.

    Federal senators always; the House member for ``cd``; state senator and
    representative for ``sd``/``hd``.  State chambers tolerate ``upper``/``lower``
    and office-title matches.
    """
    reps = await _select_slot(
        session, Representative.state == state, Representative.level == "federal", Representative.chamber == "senate"
    )
    if cd:
        reps += await _select_slot(
            session,
            Representative.state == state,
            Representative.level == "federal",
            Representative.chamber == "house",
            Representative.district == cd,
        )
    if sd:
        reps += await _select_slot(
            session,
            Representative.state == state,
            Representative.level == "state",
            Representative.district == sd,
            _senate_chamber(),
        )
    if hd:
        reps += await _select_slot(
            session,
            Representative.state == state,
            Representative.level == "state",
            Representative.district == hd,
            _house_chamber(),
        )

    seen: set[uuid.UUID] = set()
    unique: list[Representative] = []
    for rep in reps:
        if rep.id not in seen:
            seen.add(rep.id)
            unique.append(rep)
    return unique


async def find_missing_slots(
    session: AsyncSession,
    state: str,
    cd: str | None = None,
    sd: str | None = None,
    hd: str | None = None,
) -> dict[str, bool]:
    """Report which directory slots need a sync before mapping.

    Returns:
        Dict with ``federal`` and ``state`` flags.
    """
    senators = await _count(
        session, Representative.state == state, Representative.level == "federal", Representative.chamber == "senate"
    )
    federal_missing = senators < 2
    if cd and not federal_missing:
        federal_missing = (
            await _count(
                session,
                Representative.state == state,
                Representative.level == "federal",
                Representative.chamber == "house",
                Representative.district == cd,
            )
            == 0
        )

    state_missing = False
    if sd:
        state_missing = (
            await _count(
                session,
                Representative.state == state,
                Representative.level == "state",
                Representative.district == sd,
                _senate_chamber(),
            )
            == 0
        )
    if hd and not state_missing:
        state_missing = (
            await _count(
                session,
                Representative.state == state,
                Representative.level == "state",
                Representative.district == hd,
                _house_chamber(),
            )
            == 0
        )
    return {"federal": federal_missing, "state": state_missing}


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------


async def _fill_missing_slots(
    session: AsyncSession,
    settings: Settings,
    state: str,
    cd: str | None,
    sd: str | None,
    hd: str | None,
) -> None:
    missing = await find_missing_slots(session, state, cd, sd, hd)
    if missing["federal"]:
        try:
            await representative_sync_service.run_federal_sync(session, settings, state, cd)
        except (OfficialsConfigError, OfficialsProviderError, ValueError) as e:
            logger.warning("Federal sync for {} failed during mapping: {}", state, e)
    if missing["state"]:
        try:
            await representative_sync_service.run_state_sync(session, settings, state, sd, hd)
        except (OfficialsConfigError, OfficialsProviderError, ValueError) as e:
            logger.warning("State sync for {} failed during mapping: {}", state, e)


async def _clear_bindings(session: AsyncSession, user_id: uuid.UUID) -> None:
    await session.execute(delete(UserRepresentative).where(UserRepresentative.user_id == user_id))
    await session.commit()


async def assign_for_user(
    session: AsyncSession,
    user_id: uuid.UUID,
    settings: Settings | None = None,
) -> AssignmentResult:
    """Replace the user's representative bindings from their primary address.

    Missing directory slots are synced first when ``settings`` is given; sync
    failures are logged and mapping proceeds with what exists.  When the
    state is unknown or no representative matches, the user's bindings are
    cleared and a message asks them to re-run district detection.

    Args:
        session: Database session.
        user_id: User to map.
        settings: Application settings used to reach the directory providers.

    Returns:
        AssignmentResult with the number of bindings written.
    """
    address = await address_service.get_primary_address(session, user_id)
    address_state = (address.state or "").strip().upper() if address else ""
    state = address_state if len(address_state) == 2 else zip_to_state(address.postal_code if address else None)
    if not state:
        await _clear_bindings(session, user_id)
        return AssignmentResult(assigned_count=0, state=None, message=MESSAGE_NO_STATE)

    cd = address_service.normalize_cd(address.cd) if address else None
    sd = address_service.normalize_legislative(address.sd) if address else None
    hd = address_service.normalize_legislative(address.hd) if address else None

    if settings is not None:
        await _fill_missing_slots(session, settings, state, cd, sd, hd)

    reps = await find_slot_representatives(session, state, cd, sd, hd)
    if not reps:
        logger.info("No representatives matched for user {} in {}", user_id, state)
        await _clear_bindings(session, user_id)
        return AssignmentResult(assigned_count=0, state=state, message=MESSAGE_NO_MATCHES)

    await session.execute(delete(UserRepresentative).where(UserRepresentative.user_id == user_id))
    session.add_all(
        [
            UserRepresentative(
                user_id=user_id,
                rep_id=rep.id,
                level=rep.level or infer_level_from_office(rep.office_name),
            )
            for rep in reps
        ]
    )
    await session.commit()
    logger.info("Mapped {} representatives for user {} in {}", len(reps), user_id, state)
    return AssignmentResult(assigned_count=len(reps), state=state)


async def list_user_representatives(session: AsyncSession, user_id: uuid.UUID) -> list[Representative]:
    """Return the representatives currently bound to a user."""
    result = await session.execute(
        select(Representative)
        .join(UserRepresentative, UserRepresentative.rep_id == Representative.id)
        .where(UserRepresentative.user_id == user_id)
        .order_by(Representative.level, Representative.chamber, Representative.name)
    )
    return list(result.scalars().all())
