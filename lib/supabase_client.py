# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# Singleton access to the Supabase client used as the document store.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   client = SupabaseClient.get_client()
#   client.table("posts").select("*").eq("id", post_id).execute()
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from supabase import create_client, Client

from app.config import settings

logger = logging.getLogger(__name__)


class SupabaseClientError(Exception):
    """
    Error during Supabase client setup.

    Errors should tell HOW to fix, not just WHAT failed.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Holder for the shared Supabase client.

    One client instance is shared across the application; it uses the
    service_role key, which bypasses Row Level Security for server-side work.
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
                raise SupabaseClientError(
                    message="Supabase credentials are not configured",
                    code="CLIENT_NOT_CONFIGURED",
                    suggestion="Set SUPABASE_URL and SUPABASE_SERVICE_KEY, or ENTITY_STORE_BACKEND=memory",
                )
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached client (used by tests)."""
        cls._instance = None
