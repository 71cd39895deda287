"""
Persisted state for the staking pool
"""

from .records import (
    POOL_KEY,
    decode_participant,
    decode_pool,
    encode_participant,
    encode_pool,
    participant_key,
    pool_commitment_hex,
)
from .store import InMemoryStore, KeyValueStore, SQLiteStore, StorageFailure, StoreConflict, StoredValue

__all__ = [
    "POOL_KEY",
    "decode_participant",
    "decode_pool",
    "encode_participant",
    "encode_pool",
    "participant_key",
    "pool_commitment_hex",
    "InMemoryStore",
    "KeyValueStore",
    "SQLiteStore",
    "StorageFailure",
    "StoreConflict",
    "StoredValue",
]
