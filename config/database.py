"""
Supabase client for the import service.

One client per process, created on first use with the anon key. Row-level
security is enforced by the database; queries are scoped to the uploader's
tenant by the upload service.
"""

from functools import lru_cache

import structlog
from supabase import create_client, Client

from config.settings import settings
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)

HEALTH_CHECK_TABLE = "trespass_records"


@lru_cache()
def get_supabase_client() -> Client:
    """
    Cached Supabase client.

    Failures are not cached; the next call tries again.

    Raises:
        DatabaseError: The client could not be created
    """
    # Only the project host prefix goes to the log
    logger.info("connecting_to_supabase", url=settings.supabase_url[:30] + "...")

    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise DatabaseError("connect", str(e)) from e

    logger.info("supabase_connected")
    return client


def check_connection() -> dict:
    """
    Count trespass records to confirm the database answers.

    Returns:
        {"status": "healthy", "trespass_records_count": n}
        or {"status": "unhealthy", "error": "..."}
    """
    try:
        records = (
            get_supabase_client()
            .table(HEALTH_CHECK_TABLE)
            .select("id", count="exact")
            .limit(1)
            .execute()
        )
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}

    return {"status": "healthy", "trespass_records_count": records.count}
