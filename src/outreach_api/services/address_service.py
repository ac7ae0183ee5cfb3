"""Address service: primary address lookup, ZIP lock, and district persistence."""

import re
import uuid

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from outreach_api.lib.geocoder.base import AT_LARGE
from outreach_api.models.address import UserAddress

_ZIP_RE = re.compile(r"^\d{5}(-\d{4})?$")


def normalize_zip(postal_code: str) -> str:
    """Validate a ZIP or ZIP+4 and return it trimmed.

    Raises:
        ValueError: If the value is not a ZIP code.
    """
    value = (postal_code or "").strip()
    if not _ZIP_RE.match(value):
        msg = "Enter a 5-digit ZIP code"
        raise ValueError(msg)
    return value


def normalize_cd(cd: str | None) -> str | None:
    """Canonical congressional district: bare number or the at-large sentinel."""
    if cd is None or not str(cd).strip():
        return None
    value = str(cd).strip()
    if value.lower().replace("_", "-") in ("at-large", "atlarge", "at large"):
        return AT_LARGE
    if value.isdigit():
        return str(int(value)) if int(value) > 0 else AT_LARGE
    return value


def normalize_legislative(district: str | int | None) -> str | None:
    """Canonical state legislative district: leading zeros stripped from numbers."""
    if district is None:
        return None
    value = str(district).strip()
    if not value:
        return None
    return str(int(value)) if value.isdigit() else value


async def get_primary_address(session: AsyncSession, user_id: uuid.UUID) -> UserAddress | None:
    """Return the user's primary address, if any."""
    result = await session.execute(
        select(UserAddress).where(UserAddress.user_id == user_id, UserAddress.is_primary.is_(True))
    )
    return result.scalar_one_or_none()


async def ensure_primary_zip(
    session: AsyncSession,
    user_id: uuid.UUID,
    postal_code: str,
) -> tuple[UserAddress, bool]:
    """Set the user's primary ZIP once.

    Creates the primary address when missing.  A ZIP that is already set is
    locked and left unchanged.

    Args:
        session: Database session.
        user_id: Owning user.
        postal_code: ZIP or ZIP+4.

    Returns:
        Tuple of (primary address, locked) where ``locked`` is True when an
        existing ZIP was kept.

    Raises:
        ValueError: If ``postal_code`` is not a ZIP code.
    """
    zip_code = normalize_zip(postal_code)
    address = await get_primary_address(session, user_id)
    if address is None:
        address = UserAddress(user_id=user_id, postal_code=zip_code, country="US", is_primary=True)
        session.add(address)
        await session.commit()
        await session.refresh(address)
        return address, False

    if address.postal_code:
        return address, True

    address.postal_code = zip_code
    await session.commit()
    await session.refresh(address)
    return address, False


async def save_districts(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    state: str,
    cd: str | None = None,
    sd: str | None = None,
    hd: str | None = None,
    postal_code: str | None = None,
    persist_address: bool = False,
    line1: str | None = None,
    city: str | None = None,
) -> UserAddress:
    """Store detected districts on the user's primary address.

    Street and city are stored only when ``persist_address`` is set and are
    cleared otherwise.  A locked ZIP is never overwritten.

    Args:
        session: Database session.
        user_id: Owning user.
        state: Two-letter state code.
        cd: Congressional district (number or at-large).
        sd: State senate district.
        hd: State house district.
        postal_code: ZIP, stored only when none is on file.
        persist_address: Whether the user opted in to storing street/city.
        line1: Street line.
        city: City.

    Returns:
        The updated primary address.

    Raises:
        ValueError: If ``state`` is not a two-letter code.
    """
    state_code = (state or "").strip().upper()
    if len(state_code) != 2 or not state_code.isalpha():
        msg = "Require a two-letter state"
        raise ValueError(msg)

    address = await get_primary_address(session, user_id)
    if address is None:
        address = UserAddress(user_id=user_id, country="US", is_primary=True)
        session.add(address)

    address.state = state_code
    address.cd = normalize_cd(cd)
    address.sd = normalize_legislative(sd)
    address.hd = normalize_legislative(hd)
    if postal_code and not address.postal_code:
        address.postal_code = normalize_zip(postal_code)
    if persist_address:
        address.line1 = (line1 or "").strip() or None
        address.city = (city or "").strip() or None
    else:
        address.line1 = None
        address.city = None

    await session.commit()
    await session.refresh(address)
    logger.info(
        "Saved districts for user {}: state={} cd={} sd={} hd={}",
        user_id,
        state_code,
        address.cd,
        address.sd,
        address.hd,
    )
    return address
