"""
Functional core: pure vault and staking transitions.
"""

from .config import LedgerConfig, StakingParams, VaultParams, config_from_mapping, load_config
from .errors import (
    AlreadyStakedError,
    ArithmeticOverflowError,
    ErrorKind,
    InsufficientBalanceError,
    InvalidDurationError,
    InvariantViolationError,
    LedgerError,
    LimitExceededError,
    NotStakedError,
    OpResult,
    PausedError,
    StrategyNotWhitelistedError,
    UnauthorizedError,
    ValidationError,
    capture,
)
from .invariants import check_staking, check_vault
from .staking import RewardRecord, StakePosition, StakingState, init_staking_state
from .types import CallContext, Receipt, Transfer
from .vault import Strategy, VaultState, init_vault_state

__all__ = [
    "LedgerConfig",
    "StakingParams",
    "VaultParams",
    "config_from_mapping",
    "load_config",
    "AlreadyStakedError",
    "ArithmeticOverflowError",
    "ErrorKind",
    "InsufficientBalanceError",
    "InvalidDurationError",
    "InvariantViolationError",
    "LedgerError",
    "LimitExceededError",
    "NotStakedError",
    "OpResult",
    "PausedError",
    "StrategyNotWhitelistedError",
    "UnauthorizedError",
    "ValidationError",
    "capture",
    "check_staking",
    "check_vault",
    "RewardRecord",
    "StakePosition",
    "StakingState",
    "init_staking_state",
    "CallContext",
    "Receipt",
    "Transfer",
    "Strategy",
    "VaultState",
    "init_vault_state",
]
