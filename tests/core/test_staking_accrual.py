"""Tests for stakepool/core/staking/accrual.py."""

import pytest
from dataclasses import replace

from stakepool.core.staking import (
    ACC_SCALE,
    ClockRegression,
    PoolState,
    accrue,
    compute_emission_rate,
    initial_pool_state,
)


def _staked_pool(total_locked: int = 100, now: int = 0) -> PoolState:
    pool = initial_pool_state("orai", 1_000_000, now)
    return replace(
        pool,
        total_locked=total_locked,
        emission_rate=compute_emission_rate(pool.reward_budget, pool.emission_period, total_locked),
    )


class TestAccrue:
    def test_advances_rate_and_time(self):
        p = accrue(_staked_pool(), 86_400)
        assert p.global_exchange_rate == ACC_SCALE + 333_333_333
        assert p.last_update_time == 86_400
        assert p.emission_dust == 21_600_000_000

    def test_zero_elapsed_is_noop(self):
        p = accrue(_staked_pool(), 86_400)
        assert accrue(p, 86_400) == p

    def test_split_accrual_matches_single_accrual(self):
        pool = _staked_pool(total_locked=3)
        once = accrue(pool, 1_000)
        stepped = pool
        for t in range(100, 1_001, 100):
            stepped = accrue(stepped, t)
        # Dust carry makes the split path land on the same rate.
        assert stepped.global_exchange_rate == once.global_exchange_rate
        assert stepped.emission_dust == once.emission_dust

    def test_empty_pool_only_moves_clock(self):
        pool = initial_pool_state("orai", 1_000_000, 0)
        p = accrue(pool, 10_000)
        assert p.global_exchange_rate == ACC_SCALE
        assert p.emission_rate == 0
        assert p.last_update_time == 10_000

    def test_clock_regression(self):
        pool = _staked_pool(now=500)
        with pytest.raises(ClockRegression) as ei:
            accrue(pool, 499)
        assert ei.value.last_update_time == 500
        assert ei.value.now == 499

    @pytest.mark.parametrize("now", [1.0, "10", None, True])
    def test_rejects_non_int_time(self, now):
        with pytest.raises(TypeError):
            accrue(_staked_pool(), now)

    def test_input_not_mutated(self):
        pool = _staked_pool()
        accrue(pool, 1_000)
        assert pool.last_update_time == 0
        assert pool.global_exchange_rate == ACC_SCALE
