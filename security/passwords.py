"""
security/passwords.py
---------------------
bcrypt-backed password hashing used when registering and authenticating users.
"""

import bcrypt

from config import BCRYPT_WORK_FACTOR


def hash_password(plain: str) -> str:
    """Hash a plain-text password with a fresh salt."""
    salt = bcrypt.gensalt(rounds=BCRYPT_WORK_FACTOR)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Check a plain-text password against a stored bcrypt hash."""
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
