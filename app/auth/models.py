# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated user extracted from the access token.

    This is the minimal user info available from the token itself,
    without querying the database.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    email: str | None = None
    is_admin: bool = False


class TokenPayload(BaseModel):
    """Decoded access token claims used by the API."""
    sub: str
    email: str | None = None
    aud: str
    exp: int
    app_metadata: dict = {}
