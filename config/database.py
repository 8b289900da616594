"""
Database connection management.

Provides the Supabase client singleton used by the supabase learned match
store. Other backends never touch this module.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Uses lru_cache to ensure only one client is created.
    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        DatabaseError: If Supabase is not configured or connection fails
    """
    if not settings.supabase_configured:
        raise DatabaseError("connect", "Supabase is not configured. Set SUPABASE_URL and SUPABASE_KEY.")

    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

        # Test connection with simple query
        client.table(settings.learned_match_table).select("key").limit(1).execute()

        logger.info(
            "supabase_connected",
            status="success"
        )

        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise DatabaseError("connect", f"Failed to connect to Supabase: {e}") from e


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check storage connection health.

    Only the supabase backend has a remote connection to check.

    Returns:
        dict: Connection status with details
    """
    if settings.learned_match_backend != "supabase":
        return {
            "status": "healthy",
            "backend": settings.learned_match_backend
        }

    try:
        client = get_supabase_client()
        rows = (
            client.table(settings.learned_match_table)
            .select("key", count="exact")
            .execute()
        )

        return {
            "status": "healthy",
            "backend": "supabase",
            "rows_count": rows.count
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "backend": "supabase",
            "error": str(e)
        }
