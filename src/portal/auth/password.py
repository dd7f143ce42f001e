"""
Credential hashing.

Stored hashes are argon2id strings with their parameters encoded inline, so
raising the configured costs leaves old hashes verifiable. ``check_needs_rehash``
then reports them as outdated and the authorizer upgrades them on the next
successful sign-in.
"""

from __future__ import annotations

from functools import lru_cache

import argon2
import structlog

from portal.config import get_settings

logger = structlog.get_logger()


@lru_cache
def get_password_hasher() -> argon2.PasswordHasher:
    """argon2id hasher with the cost parameters from settings."""
    settings = get_settings()
    return argon2.PasswordHasher(
        time_cost=settings.password_hash_time_cost,
        memory_cost=settings.password_hash_memory_kib,
        parallelism=settings.password_hash_parallelism,
        type=argon2.Type.ID,
    )


def hash_password(password: str) -> str:
    return get_password_hasher().hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check ``password`` against a stored hash.

    A mismatch and an unreadable stored hash both come back as False.
    """
    try:
        return get_password_hasher().verify(password_hash, password)
    except argon2.exceptions.VerifyMismatchError:
        return False
    except (argon2.exceptions.VerificationError, argon2.exceptions.InvalidHashError):
        logger.warning("password_hash_unreadable")
        return False


def check_needs_rehash(password_hash: str) -> bool:
    """True when ``password_hash`` was made with other parameters than the current ones."""
    try:
        return get_password_hasher().check_needs_rehash(password_hash)
    except argon2.exceptions.InvalidHashError:
        return True
