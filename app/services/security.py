"""Password hashing and fingerprint helpers."""

import hashlib

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password for storage.

    Parameters
    ----------
    password : str
        Plaintext password.

    Returns
    -------
    str
        Salted Argon2id hash.
    """
    return password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its stored hash.

    Parameters
    ----------
    password : str
        Plaintext password.
    password_hash : str
        Stored Argon2 hash.

    Returns
    -------
    bool
        Whether the password matches. Malformed hashes never match.
    """
    try:
        return password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def fingerprint(value: str) -> str:
    """Compute a fast, non-reversible digest for cache keys.

    Parameters
    ----------
    value : str
        Secret value.

    Returns
    -------
    str
        Hex-encoded SHA-256 digest.
    """
    return hashlib.sha256(value.encode("utf-8")).hexdigest()
