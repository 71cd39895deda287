"""`staking`: pure-Python staking pool accounting kernel.

- deterministic, integer-only transitions (no floats anywhere),
- immutable state (frozen dataclasses) threaded explicitly through every call,
- lazy per-participant settlement against a global exchange-rate accumulator,
  so every operation is O(1) regardless of the number of participants.

Public API:
- `initial_pool_state(denom, reward_budget, now) -> PoolState`
- `accrue(pool, now) -> PoolState`
- `pending_reward(pool, participant) -> int`
- `step(pool, participant, params, now) -> StepResult`
- `step_or_raise(pool, participant, params, now) -> StepResult` (raises on rejection)
"""

from .accrual import accrue
from .engine import step, step_or_raise
from .errors import (
    ClockRegression,
    InsufficientFunds,
    InsufficientStaked,
    InvalidAmount,
    InvalidClaim,
    StakingError,
    StakingInvariantError,
)
from .math import ACC_SCALE, DEFAULT_EMISSION_PERIOD, EPS_SCALE, MAX_AMOUNT, compute_emission_rate, pending_reward
from .state import (
    initial_pool_state,
    participant_from_dict,
    participant_to_dict,
    pool_from_dict,
    pool_to_dict,
)
from .types import Action, ActionParams, Effect, Event, ParticipantEntry, PoolState, Rejection, StepResult
from .updates import new_participant, settle

__all__ = [
    "accrue",
    "step",
    "step_or_raise",
    "pending_reward",
    "compute_emission_rate",
    "new_participant",
    "settle",
    "initial_pool_state",
    "pool_to_dict",
    "pool_from_dict",
    "participant_to_dict",
    "participant_from_dict",
    "ACC_SCALE",
    "EPS_SCALE",
    "MAX_AMOUNT",
    "DEFAULT_EMISSION_PERIOD",
    "Action",
    "ActionParams",
    "Effect",
    "Event",
    "ParticipantEntry",
    "PoolState",
    "Rejection",
    "StepResult",
    "StakingError",
    "InvalidAmount",
    "InsufficientStaked",
    "InsufficientFunds",
    "InvalidClaim",
    "ClockRegression",
    "StakingInvariantError",
]
