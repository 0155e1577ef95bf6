"""
Cache key generation utilities for the Stablebook platform.

Keys have the form ``namespace:part:part[:vN]``. Keys that would grow past
MAX_KEY_LENGTH keep their namespace and replace the rest with a digest, so
every backend (memcached included) accepts them.
"""

import hashlib

MAX_KEY_LENGTH = 200


def secure_hash(data, length=16):
    """
    Truncated SHA-256 hex digest of a string or bytes value.

    Not used for security, only to shorten keys.
    """
    if isinstance(data, str):
        data = data.encode()
    return hashlib.sha256(data, usedforsecurity=False).hexdigest()[:length]


def generate_cache_key(namespace, *parts, version=None):
    """
    Generate a standardized cache key.

    Args:
        namespace (str): Key prefix that groups related entries
        *parts: Key components, converted with str()
        version (int): Optional version suffix

    Returns:
        str: Formatted cache key
    """
    body = ":".join(str(part) for part in parts)
    key = f"{namespace}:{body}" if body else str(namespace)

    if version is not None:
        key = f"{key}:v{version}"

    if len(key) > MAX_KEY_LENGTH:
        key = f"{namespace}:{secure_hash(key, length=32)}"
    return key
