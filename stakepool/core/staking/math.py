"""Pure fixed-point arithmetic for the staking pool.

Every function is stateless and operates on plain Python ints. Division is
Python's `//` (floor); all operands are non-negative so this is truncation.

Emission model:
- `emission_rate` is the pool-wide reward emitted per second, scaled by
  `EPS_SCALE`: `reward_budget * EPS_SCALE // emission_period`, or 0 with no stake.
- The exchange rate grows by `reward * ACC_SCALE / total_locked` per accrual, so
  each unit of stake earns `reward_budget / emission_period / total_locked` per
  second.
- The accrual remainder (`emission_dust`) is carried forward so floor rounding
  of the rate increment never strands value across accruals.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import ParticipantEntry, PoolState

ACC_SCALE: int = 1_000_000          # exchange-rate denominator (1.0 == ACC_SCALE)
EPS_SCALE: int = 1_000_000_000      # emission-rate denominator
DEFAULT_EMISSION_PERIOD: int = 30 * 24 * 60 * 60
MAX_AMOUNT: int = 2**128 - 1


def compute_emission_rate(reward_budget: int, emission_period: int, total_locked: int) -> int:
    """Scaled pool-wide emission per second. Zero when nothing is staked."""
    if emission_period <= 0:
        raise ValueError(f"emission_period must be positive: {emission_period}")
    if total_locked == 0:
        return 0
    return (reward_budget * EPS_SCALE) // emission_period


def rate_increment(
    emission_rate: int,
    elapsed: int,
    total_locked: int,
    emission_dust: int,
) -> tuple[int, int]:
    """Exchange-rate increment for `elapsed` seconds, plus the carried remainder.

    Returns ``(increment, new_dust)``. With no stake or no elapsed time the
    increment is 0 and the dust is unchanged.
    """
    if elapsed == 0 or total_locked == 0:
        return 0, emission_dust
    numerator = emission_rate * elapsed * ACC_SCALE + emission_dust
    denominator = EPS_SCALE * total_locked
    return numerator // denominator, numerator % denominator


def reward_for(staked_amount: int, rate_from: int, rate_to: int) -> int:
    """Reward earned by `staked_amount` while the rate moved `rate_from -> rate_to`."""
    if rate_to < rate_from:
        raise ValueError(f"exchange rate moved backwards: {rate_from} -> {rate_to}")
    return (staked_amount * (rate_to - rate_from)) // ACC_SCALE


def pending_reward(pool: PoolState, participant: ParticipantEntry) -> int:
    """Reward earned since the participant's last settlement (pure).

    Callers must accrue the pool to "now" first; this reads the rate as given.
    """
    if pool.total_locked == 0:
        return 0
    if participant.exchange_rate_snapshot == pool.global_exchange_rate:
        return 0
    return reward_for(
        participant.staked_amount,
        participant.exchange_rate_snapshot,
        pool.global_exchange_rate,
    )
