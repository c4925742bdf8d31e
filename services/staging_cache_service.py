"""
Temporary storage for staging lists under review.
Stores lists in memory with TTL expiration.
Single-server only; a restart drops unconfirmed pastes.
"""
import threading
from datetime import datetime, timedelta
from typing import Optional

import structlog

from config.parsing import DEFAULT_STAGING_TTL_MINUTES
from services.staging_service import StagingList

logger = structlog.get_logger(__name__)

_cache: dict[str, tuple[datetime, StagingList]] = {}
_lock = threading.Lock()


def store_staging(staging: StagingList, ttl_minutes: int = DEFAULT_STAGING_TTL_MINUTES) -> str:
    """Store a staging list, return its staging_id."""
    expires_at = datetime.now() + timedelta(minutes=ttl_minutes)
    with _lock:
        _cache[staging.staging_id] = (expires_at, staging)
        _cleanup_expired()
    logger.debug("staging_stored", staging_id=staging.staging_id, ttl_minutes=ttl_minutes)
    return staging.staging_id


def retrieve_staging(staging_id: str) -> Optional[StagingList]:
    """Retrieve a staging list by id. Returns None if expired/not found."""
    with _lock:
        entry = _cache.get(staging_id)
        if entry is None:
            return None
        expires_at, staging = entry
        if datetime.now() > expires_at:
            del _cache[staging_id]
            return None
        return staging


def delete_staging(staging_id: str) -> None:
    """Remove a staging list after commit or discard."""
    with _lock:
        _cache.pop(staging_id, None)


def clear_staging_cache() -> None:
    """Drop every cached list."""
    with _lock:
        _cache.clear()


def _cleanup_expired() -> None:
    """Remove all expired entries. Caller holds the lock."""
    now = datetime.now()
    expired = [k for k, (exp, _) in _cache.items() if now > exp]
    for k in expired:
        del _cache[k]
