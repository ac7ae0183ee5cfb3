"""Root API router with /api/v1 prefix and middleware registration."""

from fastapi import APIRouter, FastAPI

from outreach_api.api.middleware import SecurityHeadersMiddleware, setup_cors
from outreach_api.core.config import Settings


def create_router(settings: Settings) -> APIRouter:
    """Create the root API router with all sub-routers included.

    Args:
        settings: Application settings.

    Returns:
        Configured API router.
    """
    from outreach_api.api.v1.geo import geo_router
    from outreach_api.api.v1.outreach import outreach_router
    from outreach_api.api.v1.representatives import representatives_router

    root_router = APIRouter(prefix=settings.api_v1_prefix)
    root_router.include_router(geo_router)
    root_router.include_router(representatives_router)
    root_router.include_router(outreach_router)

    return root_router


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware on the FastAPI app.

    Args:
        app: The FastAPI application.
        settings: Application settings.
    """
    setup_cors(app, settings)
    app.add_middleware(SecurityHeadersMiddleware)
