"""
Database connection management.

Provides the Supabase client singleton for the order, customer and
product tables. The PostgREST timeout comes from settings so a slow
history lookup fails fast instead of stalling a parse.
"""

from supabase import create_client, Client, ClientOptions
from functools import lru_cache
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)


class DatabaseError(Exception):
    """Base exception for database errors."""
    pass


class ConnectionError(DatabaseError):
    """Failed to connect to database."""
    pass


def _client_options() -> ClientOptions:
    return ClientOptions(postgrest_client_timeout=settings.db_timeout_seconds)


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Uses lru_cache to ensure only one client is created.
    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        ConnectionError: If connection fails
    """
    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key,
            options=_client_options()
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

    Returns:
        dict: Connection status with catalog sizes
    """
    try:
        client = get_supabase_client()

        products = client.table("ProductMaster").select("ProductCode", count="exact").execute()
        customers = client.table("Customers").select("id", count="exact").execute()

        return {
            "status": "healthy",
            "products_count": products.count,
            "customers_count": customers.count
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }
