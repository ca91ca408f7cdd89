"""
Stable hashing: детерминированные проекции значений для content addressing.
"""

from src.core.hashing.stable_hash import (
    AsBytes,
    AsInt,
    SequenceNumber,
    Sha256StableHasher,
    StableHasher,
    feed,
    stable_hash,
    stable_hash_digest,
    stable_hash_with_hasher,
)

__all__ = [
    "AsBytes",
    "AsInt",
    "SequenceNumber",
    "Sha256StableHasher",
    "StableHasher",
    "feed",
    "stable_hash",
    "stable_hash_digest",
    "stable_hash_with_hasher",
]
