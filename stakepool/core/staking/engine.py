"""Dispatch-table engine for the staking pool.

``step(pool, participant, params, now)`` is the single entry point. It:

1. Validates the timestamp and amount domains.
2. Accrues the pool to ``now`` and settles the participant's pending reward.
3. Dispatches to the action's guard / update / effect functions.
4. Checks invariants on the post values.
5. Returns a ``StepResult`` (accepted, or rejected with a typed reason).

Every check runs before a result is produced: a rejected step returns no
state, so callers persisting ``StepResult.pool`` / ``StepResult.participant``
can never write a partially applied operation.
"""

from __future__ import annotations

from typing import Callable

from .accrual import accrue
from .effects import effect_claim, effect_stake, effect_withdraw
from .errors import (
    ClockRegression,
    InsufficientFunds,
    InsufficientStaked,
    InvalidAmount,
    InvalidClaim,
    StakingError,
    StakingInvariantError,
)
from .guards import guard_claim, guard_stake, guard_withdraw
from .invariants import check_all
from .math import MAX_AMOUNT
from .types import Action, ActionParams, Effect, ParticipantEntry, PoolState, Rejection, StepResult
from .updates import apply_claim, apply_stake, apply_withdraw, settle

GuardFn = Callable[[PoolState, ParticipantEntry, ActionParams], Rejection | None]
UpdateFn = Callable[[PoolState, ParticipantEntry, ActionParams, int], tuple[PoolState, ParticipantEntry]]
EffectFn = Callable[[PoolState, ParticipantEntry, ActionParams, int], Effect]

_DISPATCH: dict[Action, tuple[GuardFn, UpdateFn, EffectFn]] = {
    Action.STAKE: (guard_stake, apply_stake, effect_stake),
    Action.WITHDRAW: (guard_withdraw, apply_withdraw, effect_withdraw),
    Action.CLAIM: (guard_claim, apply_claim, effect_claim),
}

# Actions whose `amount` must lie in [1, MAX_AMOUNT].
_AMOUNT_ACTIONS = frozenset({Action.STAKE, Action.WITHDRAW})

_ERRORS: dict[Rejection, type[StakingError]] = {
    Rejection.INVALID_AMOUNT: InvalidAmount,
    Rejection.INSUFFICIENT_STAKED: InsufficientStaked,
    Rejection.INSUFFICIENT_FUNDS: InsufficientFunds,
    Rejection.INVALID_CLAIM: InvalidClaim,
}


def _validate_params(params: ActionParams) -> Rejection | None:
    if params.action not in _AMOUNT_ACTIONS:
        return None
    amount = params.amount
    if not isinstance(amount, int) or isinstance(amount, bool):
        return Rejection.INVALID_AMOUNT
    if amount < 1 or amount > MAX_AMOUNT:
        return Rejection.INVALID_AMOUNT
    return None


def step(pool: PoolState, participant: ParticipantEntry, params: ActionParams, now: int) -> StepResult:
    """Execute one action for one participant at instant ``now``.

    Returns ``StepResult`` with ``accepted=True`` and the new pool/participant
    values on success, or ``accepted=False`` with a ``rejection``.
    """
    entry = _DISPATCH.get(params.action)
    if entry is None:
        return StepResult(accepted=False, rejection=Rejection.UNKNOWN_ACTION, detail=str(params.action))

    if not isinstance(now, int) or isinstance(now, bool):
        return StepResult(accepted=False, rejection=Rejection.INVALID_TIME, detail=f"now={now!r}")

    domain_err = _validate_params(params)
    if domain_err is not None:
        return StepResult(accepted=False, rejection=domain_err, detail=f"amount={params.amount!r}")

    try:
        accrued = accrue(pool, now)
    except ClockRegression as exc:
        return StepResult(accepted=False, rejection=Rejection.CLOCK_REGRESSION, detail=str(exc))

    settled, settled_reward = settle(accrued, participant)

    guard_fn, update_fn, effect_fn = entry

    rejection = guard_fn(accrued, settled, params)
    if rejection is not None:
        return StepResult(accepted=False, rejection=rejection)

    new_pool, new_participant = update_fn(accrued, settled, params, now)

    violations = check_all(new_pool, new_participant, prev=pool)
    if violations:
        return StepResult(
            accepted=False,
            rejection=Rejection.INVARIANT,
            detail=",".join(violations),
        )

    effect = effect_fn(new_pool, settled, params, settled_reward)
    return StepResult(accepted=True, pool=new_pool, participant=new_participant, effect=effect)


def step_or_raise(pool: PoolState, participant: ParticipantEntry, params: ActionParams, now: int) -> StepResult:
    """Like ``step()`` but raises on rejection instead of returning a result.

    Raises:
        InvalidAmount, InsufficientStaked, InsufficientFunds, InvalidClaim:
            Domain or guard failure.
        ClockRegression: ``now`` precedes the pool's last update.
        StakingInvariantError: Post values violate one or more invariants.
        TypeError: ``now`` is not an int.
        ValueError: Unknown action.
    """
    result = step(pool, participant, params, now)
    if result.accepted:
        return result

    reason = result.rejection
    if reason is Rejection.CLOCK_REGRESSION:
        raise ClockRegression(pool.last_update_time, now)
    if reason is Rejection.INVARIANT:
        raise StakingInvariantError((result.detail or "").split(","))
    if reason is Rejection.INVALID_TIME:
        raise TypeError(f"now must be int: {result.detail}")
    if reason is Rejection.UNKNOWN_ACTION:
        raise ValueError(f"unknown action: {result.detail}")
    assert reason is not None  # internal: rejected results always carry a reason
    raise _ERRORS[reason](result.detail or reason.value)
