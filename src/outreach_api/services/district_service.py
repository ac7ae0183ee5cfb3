"""District service: detect districts for an address and persist them with a directory sync."""

import uuid
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from outreach_api.core.config import Settings
from outreach_api.lib.geocoder import AddressInput, CensusDistrictClient, DistrictResolver, DistrictResult
from outreach_api.lib.officials import OfficialsConfigError, OfficialsProviderError
from outreach_api.services import address_service, representative_sync_service


async def resolve_districts(address: AddressInput, settings: Settings | None = None) -> DistrictResult:
    """Resolve an address to state + CD/SD/HD; never raises.

    Args:
        address: Partial postal address.
        settings: Used for the geocoder timeout when given.

    Returns:
        DistrictResult, empty with a note when the address cannot be placed.
    """
    client = CensusDistrictClient(timeout=settings.geocoder_timeout) if settings else CensusDistrictClient()
    return await DistrictResolver(client=client).resolve(address)


async def save_and_sync(
    session: AsyncSession,
    settings: Settings,
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
) -> dict[str, Any]:
    """Persist detected districts on the primary address, then sync the directory.

    Federal sync always runs for the state (with the House seat when ``cd``
    is known); state sync runs when ``sd`` or ``hd`` is known.  Sync errors
    are collected, not raised.

    Returns:
        ``{"ok": True, "sync": {...}, "errors": [...]}``.

    Raises:
        ValueError: If the state or ZIP is malformed.
    """
    address = await address_service.save_districts(
        session,
        user_id,
        state=state,
        cd=cd,
        sd=sd,
        hd=hd,
        postal_code=postal_code,
        persist_address=persist_address,
        line1=line1,
        city=city,
    )
    state_code = address.state or ""
    saved_cd, saved_sd, saved_hd = address.cd, address.sd, address.hd

    sync: dict[str, Any] = {}
    errors: list[str] = []

    try:
        sync["federal"] = await representative_sync_service.run_federal_sync(session, settings, state_code, saved_cd)
    except (OfficialsConfigError, OfficialsProviderError, ValueError) as e:
        logger.warning("Federal sync after district save failed: {}", e)
        errors.append(f"federal: {e}")

    if saved_sd or saved_hd:
        try:
            sync["state"] = await representative_sync_service.run_state_sync(
                session, settings, state_code, saved_sd, saved_hd
            )
        except (OfficialsConfigError, OfficialsProviderError, ValueError) as e:
            logger.warning("State sync after district save failed: {}", e)
            errors.append(f"state: {e}")

    return {"ok": True, "sync": sync, "errors": errors}
