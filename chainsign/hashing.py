"""
chainsign Hash Primitives

All hashes are lowercase hexadecimal with an algorithm prefix, e.g.
"sha256:abcdef...". The prefix is part of the value a signer signs.
"""

import hashlib
from typing import Callable, Dict, Union

from .errors import UnknownHashError

HashFunction = Callable[[Union[bytes, str]], str]


def _prefixed_digest(prefix: str, algorithm: str, data: Union[bytes, str]) -> str:
    raw = data.encode('utf-8') if isinstance(data, str) else data
    return f"{prefix}:{hashlib.new(algorithm, raw).hexdigest()}"


def sha256_hash(data: Union[bytes, str]) -> str:
    """
    SHA-256 in chainsign format.

    Strings are hashed as UTF-8; the result is "sha256:" followed by 64
    lowercase hex characters.
    """
    return _prefixed_digest("sha256", "sha256", data)


def sha3_256_hash(data: Union[bytes, str]) -> str:
    """SHA3-256, formatted as "sha3-256:<hex>"."""
    return _prefixed_digest("sha3-256", "sha3_256", data)


HASH_FUNCTIONS: Dict[str, HashFunction] = {
    "sha256": sha256_hash,
    "sha3-256": sha3_256_hash,
}


def get_hasher(name: str) -> HashFunction:
    """Look up a hash function by its configuration name."""
    try:
        return HASH_FUNCTIONS[name.lower()]
    except KeyError:
        raise UnknownHashError(
            f"Unknown hash algorithm '{name}': must be one of {sorted(HASH_FUNCTIONS)}"
        ) from None


def verify_hash(declared_hash: str, data: Union[bytes, str]) -> bool:
    """
    Check data against a prefixed hash string.

    The algorithm is taken from the declared hash prefix; unknown prefixes
    never verify.
    """
    algorithm, sep, _ = declared_hash.partition(":")
    if not sep or algorithm not in HASH_FUNCTIONS:
        return False
    return HASH_FUNCTIONS[algorithm](data) == declared_hash
