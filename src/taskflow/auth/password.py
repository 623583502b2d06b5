"""Password hashing utilities.

Uses bcrypt for secure password hashing. bcrypt generates a random salt per
hash and embeds it (plus the cost factor) in the "$2b$..." output, so a
stored hash is all verify needs. The work factor comes from settings
(TASKFLOW_BCRYPT_ROUNDS, default 12, ~250ms per hash).

Both functions are CPU-bound; async callers run them in a threadpool.
"""

from functools import lru_cache
from typing import Optional

import bcrypt

from taskflow.config import settings


def _encode(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes.
    return password.encode("utf-8")[:72]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with a fresh salt."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash.

    A malformed or empty hash is a plain mismatch, never an exception.
    """
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


@lru_cache(maxsize=1)
def dummy_hash() -> str:
    """A real hash to verify against when the account does not exist.

    Login burns the same bcrypt cost for unknown emails as for wrong
    passwords, so response time does not reveal which emails are registered.
    """
    return hash_password("taskflow-dummy-password")
