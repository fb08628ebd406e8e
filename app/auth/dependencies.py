# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
# Access tokens are HS256 JWTs signed with SUPABASE_JWT_SECRET; admin rights
# come from the `app_metadata.is_admin` claim.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError
from pydantic import ValidationError

from app.config import settings
from app.auth.models import AuthUser, TokenPayload

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor
security = HTTPBearer()

TOKEN_ALGORITHM = "HS256"
TOKEN_AUDIENCE = "authenticated"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Extract and validate the user from a Bearer token.

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[TOKEN_ALGORITHM],
            audience=TOKEN_AUDIENCE,
        )
        claims = TokenPayload(**payload)
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {str(e)}")
    except ValidationError:
        logger.warning("JWT token missing required claims")
        raise _unauthorized("Invalid token: missing claims")

    try:
        user_uuid = UUID(claims.sub)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {claims.sub}")
        raise _unauthorized("Invalid token: malformed user ID")

    logger.debug(f"Authenticated user: {claims.sub}")
    return AuthUser(
        id=user_uuid,
        email=claims.email,
        is_admin=bool(claims.app_metadata.get("is_admin", False)),
    )
