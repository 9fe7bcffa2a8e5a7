"""
Bearer token verification.

Tokens are issued elsewhere; this module only decodes them. The
require_identity dependency is available to routes but is NOT attached to
report creation, boosting or status updates.
"""

import logging
from typing import Dict, Optional

from fastapi import Header, HTTPException, status
from jose import JWTError, jwt

from app.core.settings import settings

logger = logging.getLogger(__name__)


class TokenError(Exception):
    """Raised when a bearer token is missing or cannot be verified."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """'Bearer <token>' -> '<token>'; None when the header is absent or malformed."""
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        return None
    return parts[1].strip()


def verify_token(
    authorization: Optional[str],
    secret: Optional[str] = None,
    algorithm: Optional[str] = None
) -> Dict:
    """
    Decode the bearer credential in an Authorization header.

    Returns:
        The token's claims

    Raises:
        TokenError: 401 when no token is provided, 403 when it is invalid
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise TokenError("No token provided", status.HTTP_401_UNAUTHORIZED)

    try:
        return jwt.decode(
            token,
            secret or settings.JWT_SECRET,
            algorithms=[algorithm or settings.JWT_ALGORITHM],
        )
    except JWTError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise TokenError("Invalid token", status.HTTP_403_FORBIDDEN) from e


async def require_identity(authorization: Optional[str] = Header(None)) -> Dict:
    """FastAPI dependency returning the caller's token claims."""
    try:
        return verify_token(authorization)
    except TokenError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
