"""JWT bearer token handling.

Tokens are issued by the external identity provider with the user id as
``sub``.  ``create_access_token`` exists for the CLI and for tests.
"""

import uuid
from datetime import UTC, datetime, timedelta

import jwt


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be verified or carries no usable subject."""


def create_access_token(
    user_id: uuid.UUID | str,
    secret_key: str,
    algorithm: str = "HS256",
    expires_minutes: int = 30,
) -> str:
    """Create a JWT access token.

    Args:
        user_id: The user id placed in the ``sub`` claim.
        secret_key: Secret key for signing.
        algorithm: JWT signing algorithm.
        expires_minutes: Token expiration in minutes.

    Returns:
        The encoded JWT string.
    """
    expire = datetime.now(UTC) + timedelta(minutes=expires_minutes)
    payload = {
        "sub": str(user_id),
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, secret_key, algorithm=algorithm)


def decode_token(
    token: str,
    secret_key: str,
    algorithm: str = "HS256",
) -> dict:
    """Decode and validate a JWT token.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired.
        jwt.InvalidTokenError: If the token is invalid.
    """
    return jwt.decode(token, secret_key, algorithms=[algorithm])


def user_id_from_token(token: str, secret_key: str, algorithm: str = "HS256") -> uuid.UUID:
    """Verify a bearer token and return the user id in its ``sub`` claim.

    Args:
        token: The JWT string.
        secret_key: Secret key used for signing.
        algorithm: JWT signing algorithm.

    Returns:
        The authenticated user's id.

    Raises:
        InvalidTokenError: If the token is invalid, expired, or has no UUID subject.
    """
    try:
        payload = decode_token(token, secret_key, algorithm)
    except jwt.PyJWTError as exc:
        raise InvalidTokenError(str(exc)) from exc

    subject = payload.get("sub")
    if not subject:
        msg = "Token has no subject"
        raise InvalidTokenError(msg)
    try:
        return uuid.UUID(str(subject))
    except ValueError as exc:
        msg = "Token subject is not a user id"
        raise InvalidTokenError(msg) from exc
