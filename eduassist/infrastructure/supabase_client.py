"""Supabase client for backend operations."""
from typing import Optional

from supabase import Client, create_client

from eduassist.core.config import settings
from eduassist.core.logging import get_logger

logger = get_logger(__name__)

_supabase_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create the Supabase client singleton.

    Uses the service role key: row-level access rules are enforced for the
    browser client, not for this backend.
    """
    global _supabase_client

    if _supabase_client is None:
        if not settings.supabase_configured:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set in environment")

        logger.info("Creating Supabase client")
        _supabase_client = create_client(settings.supabase_url, settings.supabase_service_key)

    return _supabase_client
