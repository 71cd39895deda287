"""
Core staking algorithms
"""

from .staking import (
    ParticipantEntry,
    PoolState,
    accrue,
    pending_reward,
    step,
    step_or_raise,
)

__all__ = [
    "ParticipantEntry",
    "PoolState",
    "accrue",
    "pending_reward",
    "step",
    "step_or_raise",
]
