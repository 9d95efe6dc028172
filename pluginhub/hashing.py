"""Random data and SHA-256 helpers used for tokens and verification codes."""

from __future__ import annotations

import hashlib
import secrets
import string

RANDOM_BYTES_LENGTH = 32

_ALPHANUMERIC = string.ascii_letters + string.digits


def random_bytes() -> bytes:
    """Return 32 cryptographically secure random bytes."""
    return secrets.token_bytes(RANDOM_BYTES_LENGTH)


def hash_bytes(data: bytes) -> str:
    """Return the lower-case hex SHA-256 digest of exactly 32 bytes."""
    data = bytes(data)
    if len(data) != RANDOM_BYTES_LENGTH:
        raise ValueError(
            f"expected {RANDOM_BYTES_LENGTH} bytes, got {len(data)}"
        )
    return hashlib.sha256(data).hexdigest()


def random_string(length: int) -> str:
    """Return a random string of ASCII letters and digits."""
    if length < 0:
        raise ValueError("length must not be negative")
    return "".join(secrets.choice(_ALPHANUMERIC) for _ in range(length))