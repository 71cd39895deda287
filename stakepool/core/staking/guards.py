"""Guard functions for the staking engine.

One pure function per action. Each receives the pool already accrued to "now"
and the participant already settled against it, and returns ``None`` when the
action is allowed or the ``Rejection`` explaining why it is not.

Guards run before any update, so a rejected step never produces a partially
settled participant.
"""

from __future__ import annotations

from .math import MAX_AMOUNT
from .types import ActionParams, ParticipantEntry, PoolState, Rejection


def guard_stake(pool: PoolState, participant: ParticipantEntry, params: ActionParams) -> Rejection | None:
    if pool.total_locked + params.amount > MAX_AMOUNT:
        return Rejection.INVALID_AMOUNT
    if participant.staked_amount + params.amount > MAX_AMOUNT:
        return Rejection.INVALID_AMOUNT
    return None


def guard_withdraw(pool: PoolState, participant: ParticipantEntry, params: ActionParams) -> Rejection | None:
    if participant.staked_amount < params.amount:
        return Rejection.INSUFFICIENT_STAKED
    # Implied by the sum invariant; failing here means the ledger is corrupt.
    if pool.total_locked < params.amount:
        return Rejection.INSUFFICIENT_FUNDS
    return None


def guard_claim(pool: PoolState, participant: ParticipantEntry, params: ActionParams) -> Rejection | None:
    if participant.accrued_rewards == 0:
        return Rejection.INVALID_CLAIM
    return None
