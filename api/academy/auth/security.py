"""JWT access token handling.

Tokens are issued by the identity provider; this service only validates
them. ``create_access_token`` exists for service-to-service calls and tests.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from academy.config.settings import get_settings


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token.

    Args:
        data: Payload data (typically {"sub": user_id, "email": email, "role": role})
        expires_delta: Token lifetime (default from settings)

    Returns:
        Encoded JWT string with exp, iat and type="access" claims
    """
    settings = get_settings()

    now = datetime.now(UTC)
    to_encode = {
        **data,
        "exp": now
        + (expires_delta or timedelta(minutes=settings.auth_access_token_expire_minutes)),
        "iat": now,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.auth_secret_key, algorithm=settings.auth_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Validates signature, expiration and token type.

    Raises:
        JWTError: If token is invalid, expired, wrong type or has no subject
    """
    settings = get_settings()

    payload = jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
    )

    if payload.get("type") != "access":
        msg = "Invalid token type: expected 'access'"
        raise JWTError(msg)

    if not payload.get("sub"):
        msg = "Token missing subject"
        raise JWTError(msg)

    return payload
