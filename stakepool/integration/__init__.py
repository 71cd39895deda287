"""
Imperative-shell integration layer
"""

from .config import PoolConfig, config_from_mapping, load_config, open_store
from .messages import (
    Coin,
    DenomMismatch,
    InvalidIdentity,
    InvalidMessage,
    parse_execute,
    parse_query,
    validate_address,
)
from .service import (
    OperationReceipt,
    ParticipantSummary,
    PoolAlreadyInitialized,
    PoolNotInitialized,
    PoolSummary,
    StakingService,
    TransferInstruction,
    TransferOutbox,
    UnknownParticipant,
)

__all__ = [
    "PoolConfig",
    "config_from_mapping",
    "load_config",
    "open_store",
    "Coin",
    "DenomMismatch",
    "InvalidIdentity",
    "InvalidMessage",
    "parse_execute",
    "parse_query",
    "validate_address",
    "OperationReceipt",
    "ParticipantSummary",
    "PoolAlreadyInitialized",
    "PoolNotInitialized",
    "PoolSummary",
    "StakingService",
    "TransferInstruction",
    "TransferOutbox",
    "UnknownParticipant",
]
