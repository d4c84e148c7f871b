"""
Centralized key hashing utilities.

Deterministic digests for result cache keys and alert identifiers. Uses
BLAKE2b for speed and SHA-256 for maximum compatibility.
"""

from hashlib import blake2b, sha256


def key_digest(data: str | bytes, short: int = 16, fast: bool = True) -> str:
    """
    Generate deterministic digest for cache keys and identifiers.

    Args:
        data: Input string or bytes to hash
        short: Number of hex characters to return (default 16)
        fast: If True, uses BLAKE2b; otherwise SHA-256

    Returns:
        Hex digest string of specified length
    """
    b = data.encode() if isinstance(data, str) else data

    if fast:
        digest = blake2b(b, digest_size=32).hexdigest()
    else:
        digest = sha256(b).hexdigest()

    return digest[:short]


def cache_key_hash(key_str: str) -> str:
    """
    Generate a compact cache key hash.

    Args:
        key_str: Cache key string to hash

    Returns:
        16-character hex hash
    """
    return key_digest(key_str, short=16, fast=True)


def alert_id_hash(id_str: str) -> str:
    """
    Generate a stable identifier for a scheduled hour alert.

    Args:
        id_str: Alert identity string (date, half, ordinal, location)

    Returns:
        12-character hex hash
    """
    return key_digest(id_str, short=12, fast=True)
