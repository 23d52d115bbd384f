from __future__ import annotations

import secrets

import bcrypt


# Alphabet of the placeholder credential stored for directory-provisioned accounts.
_PASSWORD_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789!@#$%*+"


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash.
        return False


def generate_random_password(length: int = 32) -> str:
    """Random password for accounts whose real credential lives in the directory.

    The local store needs a non-empty credential; an empty one would let anyone
    log in locally with an empty password.
    """
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))
