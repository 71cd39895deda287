"""
Staking service: the imperative shell around the functional core.

Each operation runs under one process lock:
  load pool + participant -> step_or_raise() -> commit both records together.

The store commit is version-checked, so a concurrent writer in another
process surfaces as `StoreConflict` instead of a lost update. Claim payouts
are handed to the transfer sink only after the commit succeeds; moving value
is the sink's job. A sink failure is logged and reported on the receipt
(`transfer_error`); it never undoes the committed claim.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ..core.staking import (
    Action,
    ActionParams,
    ClockRegression,
    Effect,
    ParticipantEntry,
    PoolState,
    StakingError,
    accrue,
    initial_pool_state,
    new_participant,
    pending_reward,
    step_or_raise,
)
from ..state.records import (
    POOL_KEY,
    decode_participant,
    decode_pool,
    encode_participant,
    encode_pool,
    participant_key,
    pool_commitment_hex,
)
from ..state.store import KeyValueStore, StoreConflict
from .config import PoolConfig, open_store
from .messages import (
    ConfigQuery,
    ParticipantQuery,
    parse_execute,
    parse_query,
    require_denom,
    validate_address,
)

logger = logging.getLogger(__name__)


class PoolNotInitialized(RuntimeError):
    pass


class PoolAlreadyInitialized(RuntimeError):
    pass


class UnknownParticipant(LookupError):
    pass


@dataclass(frozen=True)
class TransferInstruction:
    """Outgoing transfer authorized by a claim."""

    recipient: str
    denom: str
    amount: int


TransferSink = Callable[[TransferInstruction], None]


class TransferOutbox:
    """Default sink: collects instructions for a caller to drain and execute."""

    def __init__(self) -> None:
        self._pending: List[TransferInstruction] = []
        self._lock = threading.Lock()

    def __call__(self, instruction: TransferInstruction) -> None:
        with self._lock:
            self._pending.append(instruction)

    def drain(self) -> List[TransferInstruction]:
        with self._lock:
            out, self._pending = self._pending, []
        return out


@dataclass(frozen=True)
class OperationReceipt:
    action: Action
    participant: str
    effect: Effect
    attributes: Dict[str, str]
    transfer: Optional[TransferInstruction] = None
    # Set when the transfer sink raised; `transfer` is still authorized.
    transfer_error: Optional[str] = None


@dataclass(frozen=True)
class PoolSummary:
    denom: str
    reward_budget: int
    emission_period: int
    total_locked: int
    emission_rate: int
    global_exchange_rate: int
    last_update_time: int
    commitment: str


@dataclass(frozen=True)
class ParticipantSummary:
    address: str
    staked_amount: int
    exchange_rate_snapshot: int
    last_interaction_time: int
    accrued_rewards: int
    pending_rewards: int

    @property
    def total_rewards(self) -> int:
        return self.accrued_rewards + self.pending_rewards


class StakingService:
    def __init__(
        self,
        config: PoolConfig,
        store: Optional[KeyValueStore] = None,
        *,
        identity: Callable[[Any], str] = validate_address,
        transfer_sink: Optional[TransferSink] = None,
    ) -> None:
        self.config = config
        self.store = store if store is not None else open_store(config)
        self.identity = identity
        self.transfer_sink: TransferSink = transfer_sink if transfer_sink is not None else TransferOutbox()
        self._lock = threading.Lock()

    # ----- loading -----

    def _load_pool(self) -> Tuple[PoolState, int]:
        stored = self.store.load(POOL_KEY)
        if stored is None:
            raise PoolNotInitialized("pool has not been initialized")
        return decode_pool(stored.data), stored.version

    def _load_participant(self, pid: str) -> Tuple[Optional[ParticipantEntry], int]:
        stored = self.store.load(participant_key(pid))
        if stored is None:
            return None, 0
        return decode_participant(stored.data), stored.version

    # ----- lifecycle -----

    def initialize(self, now: int) -> PoolState:
        """Create the pool record. Fails if one already exists."""
        pool = initial_pool_state(
            self.config.denom,
            self.config.reward_budget,
            now,
            emission_period=self.config.emission_period,
        )
        with self._lock:
            if self.store.load(POOL_KEY) is not None:
                raise PoolAlreadyInitialized("pool already initialized")
            self.store.commit({POOL_KEY: encode_pool(pool)}, expected={POOL_KEY: 0})
        logger.info(
            "pool initialized denom=%s reward_budget=%d emission_period=%d at=%d",
            pool.denom, pool.reward_budget, pool.emission_period, now,
        )
        return pool

    # ----- operations -----

    def _run(self, address: Any, params: ActionParams, now: int) -> OperationReceipt:
        pid = self.identity(address)
        with self._lock:
            pool, pool_version = self._load_pool()
            entry, entry_version = self._load_participant(pid)
            if entry is None:
                entry = new_participant(pool, now)

            try:
                result = step_or_raise(pool, entry, params, now)
            except ClockRegression:
                logger.error(
                    "%s rejected for %s: clock regression now=%d last_update=%d",
                    params.action.value, pid, now, pool.last_update_time,
                )
                raise
            except StakingError as exc:
                logger.warning("%s rejected for %s: %s", params.action.value, pid, exc)
                raise

            assert result.pool is not None and result.participant is not None and result.effect is not None
            key = participant_key(pid)
            try:
                self.store.commit(
                    {POOL_KEY: encode_pool(result.pool), key: encode_participant(result.participant)},
                    expected={POOL_KEY: pool_version, key: entry_version},
                )
            except StoreConflict as exc:
                logger.error("%s for %s not committed: %s", params.action.value, pid, exc)
                raise

        effect = result.effect
        amount = effect.payout if params.action is Action.CLAIM else effect.amount
        logger.info(
            "%s participant=%s amount=%d settled=%d total_locked=%d rate=%d",
            params.action.value, pid, amount, effect.settled_reward,
            effect.total_locked, effect.global_exchange_rate,
        )

        transfer = None
        transfer_error = None
        if params.action is Action.CLAIM:
            transfer = TransferInstruction(recipient=pid, denom=result.pool.denom, amount=effect.payout)
            try:
                self.transfer_sink(transfer)
            except Exception as exc:
                # Rewards are already zeroed and committed; the receipt keeps the
                # instruction so the caller can deliver it.
                logger.error(
                    "transfer sink failed for claim participant=%s amount=%d: %s",
                    pid, transfer.amount, exc,
                )
                transfer_error = str(exc) or type(exc).__name__

        return OperationReceipt(
            action=params.action,
            participant=pid,
            effect=effect,
            attributes={"action": params.action.value, "amount": str(amount)},
            transfer=transfer,
            transfer_error=transfer_error,
        )

    def stake(self, address: Any, amount: int, now: int) -> OperationReceipt:
        return self._run(address, ActionParams(action=Action.STAKE, amount=amount), now)

    def withdraw(self, address: Any, amount: int, now: int) -> OperationReceipt:
        return self._run(address, ActionParams(action=Action.WITHDRAW, amount=amount), now)

    def claim(self, address: Any, now: int) -> OperationReceipt:
        return self._run(address, ActionParams(action=Action.CLAIM), now)

    def execute(self, address: Any, message: Any, now: int) -> OperationReceipt:
        """Parse an execute message and run it; coin denoms must match the pool."""
        request = parse_execute(message)
        if request.amount is None:
            return self._run(address, ActionParams(action=request.action), now)
        amount = require_denom(request.amount, self.config.denom)
        return self._run(address, ActionParams(action=request.action, amount=amount), now)

    # ----- queries -----

    def pool_summary(self) -> PoolSummary:
        with self._lock:
            pool, _ = self._load_pool()
        return PoolSummary(
            denom=pool.denom,
            reward_budget=pool.reward_budget,
            emission_period=pool.emission_period,
            total_locked=pool.total_locked,
            emission_rate=pool.emission_rate,
            global_exchange_rate=pool.global_exchange_rate,
            last_update_time=pool.last_update_time,
            commitment=pool_commitment_hex(pool),
        )

    def participant_summary(self, address: Any, now: Optional[int] = None) -> ParticipantSummary:
        """Participant balances. With `now`, pending reward is previewed to that instant."""
        pid = self.identity(address)
        with self._lock:
            pool, _ = self._load_pool()
            entry, _ = self._load_participant(pid)
        if entry is None:
            raise UnknownParticipant(f"unknown participant: {pid}")
        if now is not None:
            pool = accrue(pool, now)
        return ParticipantSummary(
            address=pid,
            staked_amount=entry.staked_amount,
            exchange_rate_snapshot=entry.exchange_rate_snapshot,
            last_interaction_time=entry.last_interaction_time,
            accrued_rewards=entry.accrued_rewards,
            pending_rewards=pending_reward(pool, entry),
        )

    def query(self, message: Any, now: Optional[int] = None) -> Union[PoolSummary, ParticipantSummary]:
        request = parse_query(message)
        if isinstance(request, ConfigQuery):
            return self.pool_summary()
        assert isinstance(request, ParticipantQuery)
        return self.participant_summary(request.address, now=now)
