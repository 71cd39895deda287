"""
Persisted record encoding for the staking pool.

Goals:
- Deterministic JSON serialization for storage and hashing.
- Round-trippable into the functional-core `PoolState` / `ParticipantEntry`.
- Explicit versioning for future format changes.

Layout: one pool record under `POOL_KEY`; one participant record per canonical
participant key under the `participant/` namespace.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from ..core.staking import (
    ParticipantEntry,
    PoolState,
    participant_from_dict,
    participant_to_dict,
    pool_from_dict,
    pool_to_dict,
)
from .canonical import canonical_json_bytes, domain_sep_bytes, parse_canonical_json, sha256_hex


RECORD_VERSION = 1

POOL_KEY = "pool"
PARTICIPANT_PREFIX = "participant/"


def participant_key(participant_id: str) -> str:
    """Store key for a canonical participant identity."""
    if not isinstance(participant_id, str) or not participant_id:
        raise ValueError("participant_id must be a non-empty string")
    return PARTICIPANT_PREFIX + participant_id


def _with_version(data: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(data)
    out["version"] = RECORD_VERSION
    return out


def _strip_version(obj: Any, *, kind: str) -> Dict[str, Any]:
    if not isinstance(obj, Mapping):
        raise TypeError(f"{kind} record must be an object")
    version = obj.get("version")
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError(f"{kind} record version must be a positive int")
    if version != RECORD_VERSION:
        raise ValueError(f"unsupported {kind} record version: {version}")
    return {k: v for k, v in obj.items() if k != "version"}


def encode_pool(pool: PoolState) -> bytes:
    return canonical_json_bytes(_with_version(pool_to_dict(pool)))


def decode_pool(data: bytes) -> PoolState:
    fields = _strip_version(parse_canonical_json(data), kind="pool")
    try:
        return pool_from_dict(fields)
    except KeyError as exc:
        raise ValueError(f"pool record missing field {exc}") from exc


def encode_participant(entry: ParticipantEntry) -> bytes:
    return canonical_json_bytes(_with_version(participant_to_dict(entry)))


def decode_participant(data: bytes) -> ParticipantEntry:
    fields = _strip_version(parse_canonical_json(data), kind="participant")
    try:
        return participant_from_dict(fields)
    except KeyError as exc:
        raise ValueError(f"participant record missing field {exc}") from exc


def pool_commitment_hex(pool: PoolState) -> str:
    """Domain-separated hash of the canonical pool record."""
    payload = domain_sep_bytes("pool_state", version=RECORD_VERSION) + encode_pool(pool)
    return sha256_hex(payload)
