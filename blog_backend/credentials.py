"""
Password hashing with bcrypt.
"""

from __future__ import annotations

import bcrypt

from blog_backend.errors import ValidationError

BCRYPT_ROUNDS = 10


def hash_password(plain: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    try:
        hashed = bcrypt.hashpw(plain.encode("utf-8"), salt)
    except ValueError as exc:
        # Newer bcrypt releases refuse input over 72 bytes.
        raise ValidationError("Weak password", field="password") from exc
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True only if ``plain`` matches the stored bcrypt ``hashed``."""
    if not plain or not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash or an over-long password.
        return False
