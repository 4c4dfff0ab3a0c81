"""Authentication dependencies and utilities."""
import logging
from typing import Any, Dict

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.core.config import settings

logger = logging.getLogger(__name__)
security = HTTPBearer()


def get_token_payload(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Dict[str, Any]:
    """
    Decode and validate the bearer JWT.

    This validates the HS256 signature against the shared NextAuth secret.
    """
    try:
        return jwt.decode(
            credentials.credentials,
            settings.NEXTAUTH_SECRET,
            algorithms=["HS256"],
        )
    except JWTError as e:
        logger.error(f"[AUTH] JWT validation failed: {type(e).__name__}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )


def get_current_user_id(payload: Dict[str, Any] = Depends(get_token_payload)) -> str:
    """Extract user ID (sub claim) from the JWT."""
    user_id = payload.get("sub")
    if user_id is None:
        logger.error("[AUTH] JWT payload missing 'sub' claim")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    return str(user_id)


def require_admin(
    user_id: str = Depends(get_current_user_id),
    payload: Dict[str, Any] = Depends(get_token_payload),
) -> str:
    """
    Allow only users whose role may run maintenance scans.

    Returns the user ID; raises 403 for any other role.
    """
    role = payload.get("role")
    if role not in settings.SCAN_ADMIN_ROLES:
        logger.warning(f"[AUTH] User {user_id} with role {role!r} denied maintenance access")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Permission denied",
        )
    return user_id
