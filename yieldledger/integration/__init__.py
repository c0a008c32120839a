"""
Imperative shell: engines wiring the pure transitions to token custody,
a block clock and governance.
"""

from .admin import AdminRegistry
from .aggregator import DepositAndStakeReceipt, StrategyYield, WithdrawAndClaimReceipt, YieldAggregator
from .atomic import atomic
from .engine import LedgerEngine
from .ports import BlockClock, Governance, ManualClock, TokenTransfer, Transactional
from .scenario import LedgerHost, build_host, run_scenario
from .staking_engine import StakeRewardEngine
from .vault_engine import ShareVaultEngine

__all__ = [
    "AdminRegistry",
    "DepositAndStakeReceipt",
    "StrategyYield",
    "WithdrawAndClaimReceipt",
    "YieldAggregator",
    "atomic",
    "LedgerEngine",
    "BlockClock",
    "Governance",
    "ManualClock",
    "TokenTransfer",
    "Transactional",
    "LedgerHost",
    "build_host",
    "run_scenario",
    "StakeRewardEngine",
    "ShareVaultEngine",
]
