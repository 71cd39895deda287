"""Tests for stakepool/core/staking/math.py: fixed-point emission and reward arithmetic."""

from __future__ import annotations

import pytest

from stakepool.core.staking import (
    ACC_SCALE,
    DEFAULT_EMISSION_PERIOD,
    EPS_SCALE,
    ParticipantEntry,
    PoolState,
    compute_emission_rate,
    pending_reward,
)
from stakepool.core.staking.math import rate_increment, reward_for


# ---------------------------------------------------------------------------
# Emission rate
# ---------------------------------------------------------------------------

def test_emission_rate_zero_without_stake() -> None:
    assert compute_emission_rate(1_000_000, DEFAULT_EMISSION_PERIOD, 0) == 0


def test_emission_rate_is_scaled_budget_per_second() -> None:
    # 1e6 * 1e9 / 2_592_000 = 385_802_469.13...
    assert compute_emission_rate(1_000_000, DEFAULT_EMISSION_PERIOD, 100) == 385_802_469


def test_emission_rate_independent_of_pool_size() -> None:
    """Pool-wide rate; the per-unit split happens in the rate increment."""
    a = compute_emission_rate(1_000_000, DEFAULT_EMISSION_PERIOD, 1)
    b = compute_emission_rate(1_000_000, DEFAULT_EMISSION_PERIOD, 10**20)
    assert a == b


def test_emission_rate_rejects_zero_period() -> None:
    with pytest.raises(ValueError):
        compute_emission_rate(1, 0, 1)


# ---------------------------------------------------------------------------
# Rate increment + dust carry
# ---------------------------------------------------------------------------

def test_rate_increment_exact() -> None:
    # 1 reward/s for 10 s over 100 units -> 0.1 reward per unit.
    inc, dust = rate_increment(EPS_SCALE, 10, 100, 0)
    assert inc == ACC_SCALE // 10
    assert dust == 0


def test_rate_increment_noop_cases() -> None:
    assert rate_increment(EPS_SCALE, 0, 100, 7) == (0, 7)
    assert rate_increment(EPS_SCALE, 10, 0, 7) == (0, 7)


def test_dust_carry_recovers_rounding() -> None:
    """1 reward/s over 3 units: per-second increments floor, carried dust catches up."""
    total = 0
    dust = 0
    for _ in range(3):
        inc, dust = rate_increment(EPS_SCALE, 1, 3, dust)
        total += inc
    # 3 rewards over 3 units == exactly 1.0 per unit.
    assert total == ACC_SCALE
    assert dust == 0


def test_dust_stays_below_denominator() -> None:
    inc, dust = rate_increment(385_802_469, 7, 3, 0)
    assert inc > 0
    assert 0 <= dust < EPS_SCALE * 3


# ---------------------------------------------------------------------------
# Reward calculator
# ---------------------------------------------------------------------------

def test_reward_for_floor() -> None:
    assert reward_for(100, ACC_SCALE, ACC_SCALE + 15_000) == 1
    assert reward_for(100, ACC_SCALE, ACC_SCALE + 9_999) == 0


def test_reward_for_rejects_backwards_rate() -> None:
    with pytest.raises(ValueError):
        reward_for(1, ACC_SCALE + 1, ACC_SCALE)


def test_pending_reward_zero_when_pool_empty() -> None:
    pool = PoolState(denom="orai", reward_budget=1, global_exchange_rate=5 * ACC_SCALE)
    entry = ParticipantEntry(staked_amount=0, exchange_rate_snapshot=ACC_SCALE)
    assert pending_reward(pool, entry) == 0


def test_pending_reward_zero_when_snapshot_current() -> None:
    pool = PoolState(denom="orai", reward_budget=1, total_locked=10, emission_rate=1, global_exchange_rate=2 * ACC_SCALE)
    entry = ParticipantEntry(staked_amount=10, exchange_rate_snapshot=2 * ACC_SCALE)
    assert pending_reward(pool, entry) == 0


def test_pending_reward_proportional_to_stake() -> None:
    pool = PoolState(denom="orai", reward_budget=1, total_locked=300, emission_rate=1, global_exchange_rate=3 * ACC_SCALE)
    a = ParticipantEntry(staked_amount=100, exchange_rate_snapshot=ACC_SCALE)
    b = ParticipantEntry(staked_amount=200, exchange_rate_snapshot=ACC_SCALE)
    assert pending_reward(pool, a) == 200
    assert pending_reward(pool, b) == 400


def test_pending_reward_snapshot_ahead_is_corruption() -> None:
    pool = PoolState(denom="orai", reward_budget=1, total_locked=10, emission_rate=1, global_exchange_rate=ACC_SCALE)
    entry = ParticipantEntry(staked_amount=10, exchange_rate_snapshot=ACC_SCALE + 1)
    with pytest.raises(ValueError):
        pending_reward(pool, entry)
