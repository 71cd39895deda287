"""Invariant checkers for the staking engine.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass).

Note: these are per-step invariants over the pool and the one participant a
step touches. The global law `total_locked == sum(staked_amount)` spans every
ledger entry and is covered by property tests, not checked here.
"""

from __future__ import annotations

from typing import Callable

from .math import ACC_SCALE, MAX_AMOUNT, compute_emission_rate
from .types import ParticipantEntry, PoolState


def inv_staked_within_pool(p: PoolState, e: ParticipantEntry) -> bool:
    return e.staked_amount <= p.total_locked


def inv_snapshot_not_ahead(p: PoolState, e: ParticipantEntry) -> bool:
    return e.exchange_rate_snapshot <= p.global_exchange_rate


def inv_rate_at_least_baseline(p: PoolState, e: ParticipantEntry) -> bool:
    return p.global_exchange_rate >= ACC_SCALE


def inv_emission_rate_current(p: PoolState, e: ParticipantEntry) -> bool:
    return p.emission_rate == compute_emission_rate(p.reward_budget, p.emission_period, p.total_locked)


def inv_amounts_bounded(p: PoolState, e: ParticipantEntry) -> bool:
    return p.total_locked <= MAX_AMOUNT and e.staked_amount <= MAX_AMOUNT


_ALL: list[tuple[str, Callable[[PoolState, ParticipantEntry], bool]]] = [
    ("staked_within_pool", inv_staked_within_pool),
    ("snapshot_not_ahead", inv_snapshot_not_ahead),
    ("rate_at_least_baseline", inv_rate_at_least_baseline),
    ("emission_rate_current", inv_emission_rate_current),
    ("amounts_bounded", inv_amounts_bounded),
]


def check_all(pool: PoolState, participant: ParticipantEntry, *, prev: PoolState | None = None) -> list[str]:
    """Return violated invariant IDs. With `prev`, also check the transition."""
    violations = [name for name, fn in _ALL if not fn(pool, participant)]
    if prev is not None:
        if pool.global_exchange_rate < prev.global_exchange_rate:
            violations.append("rate_monotone")
        if pool.last_update_time < prev.last_update_time:
            violations.append("time_monotone")
    return violations
