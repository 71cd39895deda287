"""Effect functions for the staking engine.

Each computes the ``Effect`` from the POST values. `settled` is the participant
after settlement but before the balance change; the claim payout is read from
it.
"""

from __future__ import annotations

from .types import ActionParams, Effect, Event, ParticipantEntry, PoolState


def _pool_fields(pool: PoolState) -> dict[str, int]:
    return dict(
        total_locked=pool.total_locked,
        emission_rate=pool.emission_rate,
        global_exchange_rate=pool.global_exchange_rate,
    )


def effect_stake(
    pool: PoolState, settled: ParticipantEntry, params: ActionParams, settled_reward: int,
) -> Effect:
    return Effect(event=Event.STAKED, amount=params.amount, settled_reward=settled_reward, **_pool_fields(pool))


def effect_withdraw(
    pool: PoolState, settled: ParticipantEntry, params: ActionParams, settled_reward: int,
) -> Effect:
    return Effect(event=Event.WITHDRAWN, amount=params.amount, settled_reward=settled_reward, **_pool_fields(pool))


def effect_claim(
    pool: PoolState, settled: ParticipantEntry, params: ActionParams, settled_reward: int,
) -> Effect:
    return Effect(
        event=Event.CLAIMED,
        settled_reward=settled_reward,
        payout=settled.accrued_rewards,
        **_pool_fields(pool),
    )
