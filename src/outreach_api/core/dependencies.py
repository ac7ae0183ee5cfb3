"""FastAPI dependency injection for database sessions, bearer auth, and the admin secret."""

import hmac
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from outreach_api.core.config import Settings, get_settings
from outreach_api.core.database import get_session_factory
from outreach_api.core.security import InvalidTokenError, user_id_from_token
from outreach_api.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Yield an async database session with per-request lifecycle."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str | None:
    """Return the raw bearer token, or None when the header is absent."""
    if credentials is None:
        return None
    return credentials.credentials


async def get_current_user(
    token: Annotated[str | None, Depends(get_bearer_token)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> User:
    """Verify the bearer token and return the authenticated user.

    Raises:
        HTTPException: 401 if the token is missing, invalid, or names an unknown user.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception
    try:
        user_id = user_id_from_token(token, settings.jwt_secret_key, settings.jwt_algorithm)
    except InvalidTokenError as exc:
        raise credentials_exception from exc

    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise credentials_exception
    return user


def admin_secret_matches(settings: Settings, provided: str | None) -> bool:
    """True when ADMIN_SECRET is unset or ``provided`` equals it."""
    if not settings.admin_secret:
        return True
    return provided is not None and hmac.compare_digest(provided.encode(), settings.admin_secret.encode())


async def require_admin_secret(
    settings: Annotated[Settings, Depends(get_settings)],
    x_admin_secret: Annotated[str | None, Header()] = None,
) -> None:
    """Reject the request unless the X-Admin-Secret header matches ADMIN_SECRET.

    Admin endpoints are open when ADMIN_SECRET is not configured.
    """
    if not admin_secret_matches(settings, x_admin_secret):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
