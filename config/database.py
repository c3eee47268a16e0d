"""
Database connection management.

Provides the Supabase client singleton used to persist imported records.
The import engine itself never touches the database; only the import
service does, when an import is executed.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)

# Tables the import service writes to
IMPORT_TABLES = ("medications", "customers", "doctors")


class DatabaseError(Exception):
    """Base exception for database errors."""
    pass


class ConnectionError(DatabaseError):
    """Failed to connect to database."""
    pass


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Uses lru_cache to ensure only one client is created.
    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        ConnectionError: If credentials are missing or connection fails
    """
    if not settings.database_configured:
        logger.error("supabase_not_configured")
        raise ConnectionError("Supabase is not configured (SUPABASE_URL / SUPABASE_KEY)")

    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

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
        raise ConnectionError(f"Failed to connect to Supabase: {e}") from e


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check database connection health.

    Probes every table imports are written to.

    Returns:
        dict: {"status": "not_configured" | "healthy" | "unhealthy", ...}
              with row counts per table when healthy
    """
    if not settings.database_configured:
        return {"status": "not_configured"}

    try:
        client = get_supabase_client()
        tables = {}
        for table in IMPORT_TABLES:
            result = client.table(table).select("id", count="exact").limit(1).execute()
            tables[table] = result.count

        return {
            "status": "healthy",
            "tables": tables,
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }


def reset_connection():
    """
    Reset the cached database connection.

    Call this if connection becomes stale or after config changes.
    """
    get_supabase_client.cache_clear()
    logger.info("database_connection_reset")
