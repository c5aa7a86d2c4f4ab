"""
Security Service

Admin API key verification.

The configured key is never compared directly: both sides are hashed
with SHA-256 and compared in constant time, so response timing does not
reveal how much of a guessed key was right.
"""

import hashlib
import logging
import secrets

from catalog.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def hash_api_key(key: str) -> str:
    """
    Hash an API key using SHA-256.

    Returns:
        SHA-256 hash of the key (64 hex characters)
    """
    return hashlib.sha256(key.encode()).hexdigest()


def verify_admin_key(key: str | None) -> bool:
    """
    Check a presented key against settings.admin_api_key.

    An unset admin key rejects everything.
    """
    if not key or not settings.admin_api_key:
        return False

    valid = secrets.compare_digest(hash_api_key(key), hash_api_key(settings.admin_api_key))
    if not valid:
        logger.warning("Rejected an invalid admin API key")
    return valid
