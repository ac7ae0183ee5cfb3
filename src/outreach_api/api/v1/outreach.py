"""Outreach queue and dispatcher endpoints."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from outreach_api.core.config import Settings, get_settings
from outreach_api.core.dependencies import (
    admin_secret_matches,
    get_async_session,
    get_bearer_token,
    get_current_user,
)
from outreach_api.core.security import InvalidTokenError, user_id_from_token
from outreach_api.lib.outreach import EmailConfigError
from outreach_api.models.user import User
from outreach_api.schemas.outreach import (
    EnqueueRequest,
    OutreachRequestResponse,
    PrayerAnalyticsResponse,
    ProcessRequest,
)
from outreach_api.services.outreach_service import (
    OutreachRequestConflictError,
    OutreachRequestNotFoundError,
    deliver_queued,
    deliver_single,
    enqueue,
    enqueue_to_president,
    list_user_requests,
    mark_sent,
    prayer_outreach_analytics,
)

outreach_router = APIRouter(prefix="/outreach", tags=["outreach"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ---------------------------------------------------------------------------
# Queue
# ---------------------------------------------------------------------------


@outreach_router.post("/enqueue", response_model=list[OutreachRequestResponse])
async def enqueue_outreach(
    body: EnqueueRequest,
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
) -> list[OutreachRequestResponse]:
    """Queue a prayer for the caller's representatives (or the president).

    Only representatives with an email on file are queued.  Requests already
    queued or sent today are skipped; failed ones are requeued.
    """
    try:
        if body.president:
            rows = await enqueue_to_president(
                session, current_user.id, body.prayer_id, body.channels, subject=body.subject, body=body.body
            )
        else:
            rows = await enqueue(
                session,
                current_user.id,
                body.prayer_id,
                body.channels,
                rep_ids=body.rep_ids,
                subject=body.subject,
                body=body.body,
                settings=settings,
            )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except Exception as e:
        logger.error(f"Unexpected error enqueuing outreach: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error enqueuing outreach.",
        ) from e
    return [OutreachRequestResponse.model_validate(r) for r in rows]


@outreach_router.get("/requests", response_model=list[OutreachRequestResponse])
async def my_outreach_requests(
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
) -> list[OutreachRequestResponse]:
    """List the caller's outreach requests, newest first."""
    rows = await list_user_requests(session, current_user.id)
    return [OutreachRequestResponse.model_validate(r) for r in rows]


@outreach_router.get("/prayers/{prayer_id}/analytics", response_model=PrayerAnalyticsResponse)
async def prayer_analytics(
    prayer_id: uuid.UUID,
    session: AsyncSession = Depends(get_async_session),
    _user: User = Depends(get_current_user),
) -> PrayerAnalyticsResponse:
    """Count a prayer's outreach requests by status and by channel."""
    return PrayerAnalyticsResponse(**await prayer_outreach_analytics(session, prayer_id))


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


@outreach_router.post("/process")
async def process_outreach(
    body: ProcessRequest,
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
    token: str | None = Depends(get_bearer_token),
    x_admin_secret: Annotated[str | None, Header()] = None,
) -> JSONResponse:
    """Run a dispatcher action.

    ``deliver_queued`` and ``mark_sent`` require the admin secret;
    ``deliver_single`` requires the bearer token of the request's owner.
    """
    try:
        if body.action == "deliver_queued":
            if not admin_secret_matches(settings, x_admin_secret):
                return _error(status.HTTP_401_UNAUTHORIZED, "Unauthorized")
            summary = await deliver_queued(session, settings)
            return JSONResponse({"ok": True, **summary.to_dict()})

        if body.action == "mark_sent":
            if not admin_secret_matches(settings, x_admin_secret):
                return _error(status.HTTP_401_UNAUTHORIZED, "Unauthorized")
            if not body.ids:
                return _error(status.HTTP_400_BAD_REQUEST, "No ids provided")
            updated = await mark_sent(session, body.ids)
            return JSONResponse({"ok": True, "updated": updated})

        if body.action == "deliver_single":
            if not token:
                return _error(status.HTTP_401_UNAUTHORIZED, "Missing Authorization Bearer token")
            try:
                user_id = user_id_from_token(token, settings.jwt_secret_key, settings.jwt_algorithm)
            except InvalidTokenError:
                return _error(status.HTTP_401_UNAUTHORIZED, "Invalid token")
            try:
                detail = await deliver_single(
                    session, settings, user_id, request_id=body.request_id, prayer_id=body.prayer_id
                )
            except OutreachRequestNotFoundError as e:
                return _error(status.HTTP_404_NOT_FOUND, str(e))
            except OutreachRequestConflictError as e:
                return _error(status.HTTP_409_CONFLICT, str(e))
            return JSONResponse(
                {
                    "ok": True,
                    "used_stream": detail.used_stream,
                    "used_template_alias": detail.used_template_alias,
                    "detail": detail.to_dict(),
                }
            )
    except ValueError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    except EmailConfigError as e:
        logger.error(f"Email is not configured: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
    except Exception as e:
        logger.error(f"Unexpected error processing outreach action {body.action!r}: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")

    return _error(status.HTTP_400_BAD_REQUEST, "Unknown action")
