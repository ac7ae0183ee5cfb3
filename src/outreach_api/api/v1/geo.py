"""District detection and address persistence endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from outreach_api.core.config import Settings, get_settings
from outreach_api.core.dependencies import get_async_session, get_current_user
from outreach_api.lib.geocoder import AddressInput
from outreach_api.models.user import User
from outreach_api.schemas.geo import (
    DetectRequest,
    DetectResponse,
    PrimaryZipRequest,
    PrimaryZipResponse,
    SaveDistrictsRequest,
    SaveDistrictsResponse,
)
from outreach_api.services import address_service, district_service

geo_router = APIRouter(prefix="/geo", tags=["geo"])


@geo_router.options("/detect", include_in_schema=False)
async def detect_preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK)


@geo_router.post("/detect", response_model=DetectResponse)
async def detect_districts(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Detect congressional and state legislative districts for an address.

    Always responds 200.  Unusable input (malformed JSON, ZIP-only) and
    upstream failures yield null districts with an explanatory ``note``.
    """
    try:
        payload = DetectRequest.model_validate(await request.json())
    except ValueError:
        payload = DetectRequest()

    address = AddressInput(
        line1=payload.line1,
        city=payload.city,
        state=payload.state,
        postal_code=payload.postal_code,
    )
    result = await district_service.resolve_districts(address, settings)
    return JSONResponse(result.to_dict())


@geo_router.post("/districts", response_model=SaveDistrictsResponse)
async def save_districts(
    body: SaveDistrictsRequest,
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
) -> SaveDistrictsResponse:
    """Persist detected districts on the caller's primary address and sync the directory.

    Street and city are stored only when ``persist_address`` is true.
    """
    try:
        result = await district_service.save_and_sync(
            session,
            settings,
            current_user.id,
            state=body.state,
            cd=body.cd,
            sd=body.sd,
            hd=body.hd,
            postal_code=body.postal_code,
            persist_address=body.persist_address,
            line1=body.line1,
            city=body.city,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except Exception as e:
        logger.error(f"Unexpected error saving districts: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error saving districts.",
        ) from e
    return SaveDistrictsResponse(**result)


@geo_router.post("/zip", response_model=PrimaryZipResponse)
async def set_primary_zip(
    body: PrimaryZipRequest,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
) -> PrimaryZipResponse:
    """Set the caller's primary ZIP.  An existing ZIP is locked and kept."""
    try:
        _, locked = await address_service.ensure_primary_zip(session, current_user.id, body.postal_code)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    if locked:
        return PrimaryZipResponse(ok=True, locked=True, message="ZIP is locked. Contact support to change it.")
    return PrimaryZipResponse(ok=True)
