"""Property tests: random operation sequences over a small set of participants.

Laws checked after every accepted step:
- total_locked equals the sum of all staked amounts,
- the global exchange rate never decreases,
- everything paid or owed never exceeds what the schedule emitted while
  something was staked.
"""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from stakepool.core.staking import (
    Action,
    ActionParams,
    ParticipantEntry,
    PoolState,
    accrue,
    initial_pool_state,
    new_participant,
    pending_reward,
    step,
)

BUDGET = 1_000_000
PERIOD = 2_592_000
PARTICIPANTS = ("alice", "bob", "carol")


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def op_strategy() -> st.SearchStrategy[tuple[str, ActionParams, int]]:
    who = st.sampled_from(PARTICIPANTS)
    dt = st.integers(min_value=0, max_value=200_000)
    amount = st.integers(min_value=1, max_value=10**12)
    params = st.one_of(
        st.builds(ActionParams, action=st.just(Action.STAKE), amount=amount),
        st.builds(ActionParams, action=st.just(Action.WITHDRAW), amount=amount),
        st.builds(ActionParams, action=st.just(Action.CLAIM)),
    )
    return st.tuples(who, params, dt)


ops_strategy = st.lists(op_strategy(), min_size=1, max_size=40)


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

class Model:
    def __init__(self) -> None:
        self.pool: PoolState = initial_pool_state("orai", BUDGET, 0)
        self.entries: dict[str, ParticipantEntry] = {}
        self.now = 0
        self.claimed = 0
        self.active_time = 0

    def apply(self, who: str, params: ActionParams, dt: int) -> None:
        self.now += dt
        entry = self.entries.get(who) or new_participant(self.pool, self.now)
        prev = self.pool
        r = step(self.pool, entry, params, self.now)
        if not r.accepted:
            return
        if prev.total_locked > 0:
            self.active_time += self.now - prev.last_update_time
        assert r.pool.global_exchange_rate >= prev.global_exchange_rate
        self.pool = r.pool
        self.entries[who] = r.participant
        self.claimed += r.effect.payout

    def owed(self) -> int:
        return sum(e.accrued_rewards + pending_reward(self.pool, e) for e in self.entries.values())


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

class TestLaws:
    @given(ops=ops_strategy)
    @settings(max_examples=300, deadline=None)
    def test_total_locked_is_sum_of_stakes(self, ops):
        m = Model()
        for who, params, dt in ops:
            m.apply(who, params, dt)
            assert m.pool.total_locked == sum(e.staked_amount for e in m.entries.values())

    @given(ops=ops_strategy)
    @settings(max_examples=300, deadline=None)
    def test_rewards_never_exceed_emission(self, ops):
        m = Model()
        for who, params, dt in ops:
            m.apply(who, params, dt)
            assert (m.claimed + m.owed()) * PERIOD <= BUDGET * m.active_time

    @given(ops=ops_strategy, extra=st.integers(min_value=0, max_value=10**7))
    @settings(max_examples=200, deadline=None)
    def test_pending_nonnegative_and_monotone_in_time(self, ops, extra):
        m = Model()
        for who, params, dt in ops:
            m.apply(who, params, dt)
        later = accrue(m.pool, m.now + extra)
        for e in m.entries.values():
            now_pending = pending_reward(m.pool, e)
            assert now_pending >= 0
            assert pending_reward(later, e) >= now_pending

    @given(ops=ops_strategy)
    @settings(max_examples=200, deadline=None)
    def test_accrue_idempotent_at_same_instant(self, ops):
        m = Model()
        for who, params, dt in ops:
            m.apply(who, params, dt)
        once = accrue(m.pool, m.now)
        assert accrue(once, m.now) == once
