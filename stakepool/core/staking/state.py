"""State construction and serialization for the staking engine.

`initial_pool_state()` returns a freshly initialized pool: nothing staked,
zero emission, the 1:1 baseline exchange rate.

Round-trip property (tested): `pool_from_dict(pool_to_dict(p)) == p` and
likewise for participants.
"""

from __future__ import annotations

from typing import Any, Mapping

from .math import DEFAULT_EMISSION_PERIOD
from .types import ParticipantEntry, PoolState

# Auto-derived from the dataclass field definitions (single source of truth).
POOL_FIELD_NAMES: tuple[str, ...] = tuple(PoolState.__dataclass_fields__)
PARTICIPANT_FIELD_NAMES: tuple[str, ...] = tuple(ParticipantEntry.__dataclass_fields__)


def initial_pool_state(
    denom: str,
    reward_budget: int,
    now: int,
    *,
    emission_period: int = DEFAULT_EMISSION_PERIOD,
) -> PoolState:
    """Return the pool record created at initialization time `now`."""
    return PoolState(
        denom=denom,
        reward_budget=reward_budget,
        emission_period=emission_period,
        last_update_time=now,
    )


def pool_to_dict(pool: PoolState) -> dict[str, str | int]:
    return {name: getattr(pool, name) for name in POOL_FIELD_NAMES}


def participant_to_dict(entry: ParticipantEntry) -> dict[str, int]:
    return {name: getattr(entry, name) for name in PARTICIPANT_FIELD_NAMES}


def _int_field(d: Mapping[str, Any], name: str) -> int:
    val = d[name]
    if not isinstance(val, int) or isinstance(val, bool):
        raise TypeError(f"field {name!r} must be int, got {type(val).__name__}")
    return int(val)  # normalize int subclasses


def pool_from_dict(d: Mapping[str, Any]) -> PoolState:
    """Deserialize a dict to a PoolState. Raises KeyError on missing fields."""
    kwargs: dict[str, Any] = {}
    for name in POOL_FIELD_NAMES:
        if name == "denom":
            val = d[name]
            if not isinstance(val, str):
                raise TypeError(f"field 'denom' must be str, got {type(val).__name__}")
            kwargs[name] = val
        else:
            kwargs[name] = _int_field(d, name)
    return PoolState(**kwargs)


def participant_from_dict(d: Mapping[str, Any]) -> ParticipantEntry:
    """Deserialize a dict to a ParticipantEntry. Raises KeyError on missing fields."""
    return ParticipantEntry(**{name: _int_field(d, name) for name in PARTICIPANT_FIELD_NAMES})
