"""Password credentials for anonymous posts and member accounts.

Hashes are Argon2id PHC strings (``$argon2id$v=19$m=...,t=...,p=...$salt$hash``),
which carry their own cost parameters so they can be raised later without
invalidating stored records.
"""
from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

TIME_COST = 2
MEMORY_COST = 19 * 1024
PARALLELISM = 1
HASH_LENGTH = 32
SALT_BYTES = 16
MIN_EDIT_PASSWORD_LENGTH = 4

password_hasher = PasswordHasher(
    time_cost=TIME_COST,
    memory_cost=MEMORY_COST,
    parallelism=PARALLELISM,
    hash_len=HASH_LENGTH,
    salt_len=SALT_BYTES,
)


def hash_password(password: str) -> str:
    """Derive a salted Argon2id record for ``password``.

    Args:
        password: Plaintext password chosen by the author.

    Returns:
        PHC-formatted string containing parameters, salt and hash.
    """
    return password_hasher.hash(password)


def verify_password(password: str, record: str | None) -> bool:
    """Check ``password`` against a stored record.

    Any malformed record yields ``False`` rather than an exception.
    """
    if not record or not isinstance(password, str):
        return False
    try:
        return password_hasher.verify(record, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def meets_minimum_length(password: str | None) -> bool:
    """Return True when ``password`` satisfies the edit-password length policy."""
    return bool(password) and len(password) >= MIN_EDIT_PASSWORD_LENGTH
