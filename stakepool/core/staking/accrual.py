"""Accrual engine: advance the global exchange rate to a given instant."""

from __future__ import annotations

from dataclasses import replace

from .errors import ClockRegression
from .math import compute_emission_rate, rate_increment
from .types import PoolState


def accrue(pool: PoolState, now: int) -> PoolState:
    """Return `pool` advanced from `pool.last_update_time` to `now`.

    Emission over an interval with nothing staked is dropped; there is no one
    to credit it to. Calling twice with the same `now` is a no-op the second
    time.

    Raises:
        ClockRegression: `now` is before the pool's last update.
    """
    if not isinstance(now, int) or isinstance(now, bool):
        raise TypeError("now must be int")
    elapsed = now - pool.last_update_time
    if elapsed < 0:
        raise ClockRegression(pool.last_update_time, now)

    increment, dust = rate_increment(
        pool.emission_rate, elapsed, pool.total_locked, pool.emission_dust,
    )
    return replace(
        pool,
        global_exchange_rate=pool.global_exchange_rate + increment,
        emission_dust=dust,
        last_update_time=now,
        emission_rate=compute_emission_rate(
            pool.reward_budget, pool.emission_period, pool.total_locked,
        ),
    )
