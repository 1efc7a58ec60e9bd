"""
Supabase client access.

One client is shared by the product store, search tracking and suggestions;
each of those also accepts an explicit client so tests can pass fakes.
"""

from functools import lru_cache
from typing import Dict, Optional

from supabase import Client, create_client

from config.settings import get_settings


class SupabaseClientError(Exception):
    """Raised when Supabase client cannot be created."""
    pass


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """
    Get the shared Supabase client (service role).

    Raises:
        SupabaseClientError: If client cannot be created
    """
    try:
        settings = get_settings()
        return create_client(settings.supabase_url, settings.supabase_service_key)
    except Exception as e:
        raise SupabaseClientError(f"Failed to create Supabase client: {e}") from e


def get_supabase_client_optional() -> Optional[Client]:
    """The shared client, or None when it cannot be created."""
    try:
        return get_supabase_client()
    except SupabaseClientError:
        return None


def check_table(table: str) -> Dict[str, Optional[str]]:
    """
    Read one row of ``table`` to check the catalog is reachable.

    Returns ``{"status": ..., "error": ...}`` where status is one of
    connected, empty, not_configured or error. Never raises.
    """
    client = get_supabase_client_optional()
    if client is None:
        return {"status": "not_configured", "error": None}
    try:
        result = client.table(table).select("id").limit(1).execute()
    except Exception as e:
        return {"status": "error", "error": str(e)}
    return {"status": "connected" if result.data else "empty", "error": None}
