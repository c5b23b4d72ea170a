"""Password hashing with bcrypt.

bcrypt is called directly rather than through passlib. bcrypt only looks at
the first 72 bytes of a password; longer passwords are truncated explicitly
so newer bcrypt releases do not raise on them.
"""

import bcrypt

BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a plaintext password with a fresh salt."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash.

    Malformed hashes verify as False rather than raising.
    """
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except ValueError:
        return False
