"""
Auth utilities for the FitTrack API.

Tokens are issued by the login service; this module only verifies them and
extracts the user id. Falls back to the X-User-Id header (service-to-service
calls and tests).
"""
from fastapi import Header, HTTPException, Request
from typing import Optional
from fittrack.core.config import settings
import jwt
import logging

logger = logging.getLogger("fittrack")


def verify_jwt(token: str) -> Optional[str]:
    """
    Verify a bearer JWT and extract the user id.

    Args:
        token: JWT from Authorization header (Bearer {token})

    Returns:
        user_id from the token's 'sub' claim, or None when no JWT_SECRET is configured

    Raises:
        HTTPException 401: Invalid or expired token
    """
    if not settings.JWT_SECRET:
        logger.debug("No JWT_SECRET configured, skipping JWT validation")
        return None

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=settings.jwt_algorithms(),
            options={"verify_signature": True, "verify_exp": True}
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid token: {e}")
        raise HTTPException(status_code=401, detail="Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return str(user_id)


async def get_current_user_id(
    request: Request,
    x_user_id: Optional[str] = Header(None, description="Resolved user id from a trusted caller"),
) -> str:
    """
    Extract current user ID from request context.

    Priority:
    1. JWT from Authorization header
    2. X-User-Id header
    3. Raise 401 Unauthorized
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        user_id = verify_jwt(auth_header[7:])
        if user_id:
            return user_id

    if x_user_id and x_user_id.strip():
        return x_user_id.strip()

    raise HTTPException(
        status_code=401,
        detail="Missing Authorization (Bearer JWT) or X-User-Id header",
    )
