"""Representative directory sync and user mapping endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from outreach_api.core.config import Settings, get_settings
from outreach_api.core.dependencies import get_async_session, get_current_user, require_admin_secret
from outreach_api.lib.officials import OfficialsConfigError, OfficialsProviderError
from outreach_api.models.user import User
from outreach_api.schemas.representative import (
    AssignResponse,
    CivicSyncResponse,
    RepresentativeResponse,
    SyncResponse,
)
from outreach_api.services.representative_sync_service import run_civic_sync, run_federal_sync, run_state_sync
from outreach_api.services.user_representative_service import assign_for_user, list_user_representatives

representatives_router = APIRouter(prefix="/representatives", tags=["representatives"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ---------------------------------------------------------------------------
# Admin: directory sync
# ---------------------------------------------------------------------------


@representatives_router.get(
    "/sync/federal",
    response_model=SyncResponse,
    dependencies=[Depends(require_admin_secret)],
)
async def sync_federal_directory(
    state: str = Query(..., description="Two-letter state code"),
    house_district: str | None = Query(None, description="Congressional district number or At-Large"),
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> SyncResponse | JSONResponse:
    """Replace a state's U.S. senators and, optionally, one House seat from Congress.gov."""
    try:
        seeded = await run_federal_sync(session, settings, state, house_district)
    except ValueError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    except (OfficialsConfigError, OfficialsProviderError) as e:
        logger.error(f"Federal sync failed for {state}: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
    except Exception as e:
        logger.error(f"Unexpected error in federal sync: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")
    return SyncResponse(seeded=seeded)


@representatives_router.get(
    "/sync/state",
    response_model=SyncResponse,
    dependencies=[Depends(require_admin_secret)],
)
async def sync_state_directory(
    state: str = Query(..., description="Two-letter state code"),
    sd: str | None = Query(None, description="State senate district"),
    hd: str | None = Query(None, description="State house district"),
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> SyncResponse | JSONResponse:
    """Replace the state senator and representative seats from Open States."""
    if not sd and not hd:
        return _error(status.HTTP_400_BAD_REQUEST, "Provide sd and/or hd")
    try:
        seeded = await run_state_sync(session, settings, state, sd, hd)
    except ValueError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    except (OfficialsConfigError, OfficialsProviderError) as e:
        logger.error(f"State sync failed for {state}: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
    except Exception as e:
        logger.error(f"Unexpected error in state sync: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")
    return SyncResponse(seeded=seeded)


@representatives_router.get(
    "/sync/civic",
    response_model=CivicSyncResponse,
    dependencies=[Depends(require_admin_secret)],
)
async def sync_civic_directory(
    address: str = Query(..., min_length=1, description="Address or ZIP code"),
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> CivicSyncResponse | JSONResponse:
    """Replace every slot the civic aggregator reports for an address."""
    try:
        seeded = await run_civic_sync(session, settings, address)
    except ValueError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    except (OfficialsConfigError, OfficialsProviderError) as e:
        logger.error(f"Civic sync failed: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
    except Exception as e:
        logger.error(f"Unexpected error in civic sync: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")
    return CivicSyncResponse(seeded=seeded)


# ---------------------------------------------------------------------------
# User mapping
# ---------------------------------------------------------------------------


@representatives_router.post("/assign", response_model=AssignResponse)
async def assign_my_representatives(
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
) -> AssignResponse:
    """Rebuild the caller's representative bindings from their primary address."""
    try:
        result = await assign_for_user(session, current_user.id, settings)
    except Exception as e:
        logger.error(f"Unexpected error assigning representatives: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error assigning representatives.",
        ) from e
    return AssignResponse(assigned_count=result.assigned_count, state=result.state, message=result.message)


@representatives_router.get("/mine", response_model=list[RepresentativeResponse])
async def my_representatives(
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
) -> list[RepresentativeResponse]:
    """List the representatives bound to the caller."""
    reps = await list_user_representatives(session, current_user.id)
    return [RepresentativeResponse.model_validate(r) for r in reps]
