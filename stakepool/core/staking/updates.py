"""State transition functions for the staking engine.

`settle()` folds a participant's pending reward into `accrued_rewards` and
advances their snapshot. The per-action functions then apply the balance
change to the (accrued pool, settled participant) pair and return the post
values. Updates are implemented via `dataclasses.replace()` on frozen
dataclasses.
"""

from __future__ import annotations

from dataclasses import replace

from .math import compute_emission_rate, pending_reward
from .types import ActionParams, ParticipantEntry, PoolState


def new_participant(pool: PoolState, now: int) -> ParticipantEntry:
    """Ledger entry for a participant seen for the first time."""
    return ParticipantEntry(
        staked_amount=0,
        exchange_rate_snapshot=pool.global_exchange_rate,
        last_interaction_time=now,
        accrued_rewards=0,
    )


def settle(pool: PoolState, participant: ParticipantEntry) -> tuple[ParticipantEntry, int]:
    """Return the settled participant and the reward that was folded in.

    `pool` must already be accrued to the current instant.
    """
    reward = pending_reward(pool, participant)
    settled = replace(
        participant,
        accrued_rewards=participant.accrued_rewards + reward,
        exchange_rate_snapshot=pool.global_exchange_rate,
    )
    return settled, reward


def _with_total_locked(pool: PoolState, total_locked: int) -> PoolState:
    return replace(
        pool,
        total_locked=total_locked,
        emission_rate=compute_emission_rate(pool.reward_budget, pool.emission_period, total_locked),
    )


def apply_stake(
    pool: PoolState, participant: ParticipantEntry, params: ActionParams, now: int,
) -> tuple[PoolState, ParticipantEntry]:
    return (
        _with_total_locked(pool, pool.total_locked + params.amount),
        replace(
            participant,
            staked_amount=participant.staked_amount + params.amount,
            exchange_rate_snapshot=pool.global_exchange_rate,
            last_interaction_time=now,
        ),
    )


def apply_withdraw(
    pool: PoolState, participant: ParticipantEntry, params: ActionParams, now: int,
) -> tuple[PoolState, ParticipantEntry]:
    return (
        _with_total_locked(pool, pool.total_locked - params.amount),
        replace(
            participant,
            staked_amount=participant.staked_amount - params.amount,
            exchange_rate_snapshot=pool.global_exchange_rate,
            last_interaction_time=now,
        ),
    )


def apply_claim(
    pool: PoolState, participant: ParticipantEntry, params: ActionParams, now: int,
) -> tuple[PoolState, ParticipantEntry]:
    return (
        pool,
        replace(
            participant,
            accrued_rewards=0,
            exchange_rate_snapshot=pool.global_exchange_rate,
            last_interaction_time=now,
        ),
    )
