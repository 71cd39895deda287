"""Data types for the staking pool engine.

All types are frozen dataclasses (immutable). Transitions produce new values
via `dataclasses.replace()`; nothing is mutated in place.

Units/conventions:
- amounts are integer base units of the pool's single `denom`.
- `global_exchange_rate` / `exchange_rate_snapshot` are reward-per-unit-stake
  accumulators scaled by `ACC_SCALE` (baseline 1:1 == `ACC_SCALE`).
- `emission_rate` is pool-wide reward per second scaled by `EPS_SCALE`.
- timestamps are integer seconds.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique

from .math import ACC_SCALE, DEFAULT_EMISSION_PERIOD


def _require_nonneg_int(name: str, value: object) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


@unique
class Action(Enum):
    STAKE = "stake"
    WITHDRAW = "withdraw"
    CLAIM = "claim"


@unique
class Event(Enum):
    STAKED = "Staked"
    WITHDRAWN = "Withdrawn"
    CLAIMED = "Claimed"


@unique
class Rejection(Enum):
    """Typed failure reasons returned by `step()`."""
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_STAKED = "insufficient_staked"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_CLAIM = "invalid_claim"
    CLOCK_REGRESSION = "clock_regression"
    INVALID_TIME = "invalid_time"
    INVARIANT = "invariant"
    UNKNOWN_ACTION = "unknown_action"


@dataclass(frozen=True)
class PoolState:
    """The single shared pool record."""

    denom: str
    reward_budget: int
    emission_period: int = DEFAULT_EMISSION_PERIOD

    total_locked: int = 0
    emission_rate: int = 0
    global_exchange_rate: int = ACC_SCALE
    last_update_time: int = 0

    # Accrual rounding remainder, carried into the next accrual.
    emission_dust: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.denom, str) or not self.denom:
            raise ValueError("denom must be a non-empty string")
        for name in (
            "reward_budget", "emission_period", "total_locked", "emission_rate",
            "global_exchange_rate", "last_update_time", "emission_dust",
        ):
            _require_nonneg_int(name, getattr(self, name))
        if self.emission_period == 0:
            raise ValueError("emission_period must be positive")
        if self.global_exchange_rate < ACC_SCALE:
            raise ValueError(
                f"global_exchange_rate must be >= baseline {ACC_SCALE}: {self.global_exchange_rate}"
            )


@dataclass(frozen=True)
class ParticipantEntry:
    """One participant's ledger entry."""

    staked_amount: int = 0
    exchange_rate_snapshot: int = ACC_SCALE
    last_interaction_time: int = 0
    accrued_rewards: int = 0

    def __post_init__(self) -> None:
        for name in (
            "staked_amount", "exchange_rate_snapshot", "last_interaction_time", "accrued_rewards",
        ):
            _require_nonneg_int(name, getattr(self, name))


@dataclass(frozen=True)
class ActionParams:
    """Parameters for an action. `amount` is unused by CLAIM."""

    action: Action
    amount: int = 0


@dataclass(frozen=True)
class Effect:
    """Post-state observables of an accepted step."""

    event: Event
    amount: int = 0             # staked / withdrawn amount
    settled_reward: int = 0     # pending reward folded into accrued_rewards by this step
    payout: int = 0             # claim only: amount authorized for transfer
    total_locked: int = 0
    emission_rate: int = 0
    global_exchange_rate: int = 0


@dataclass(frozen=True)
class StepResult:
    """Result of a single step: either accepted with new values, or rejected."""

    accepted: bool
    pool: PoolState | None = None
    participant: ParticipantEntry | None = None
    effect: Effect | None = None
    rejection: Rejection | None = None
    detail: str | None = None
