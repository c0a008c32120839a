"""
State tables for the vault and staking ledgers
"""

from .ledger import ZERO_ACCOUNT, Account, Amount, AmountTable, StrategyId
from .token_ledger import DEFAULT_MAX_SUPPLY, TokenLedger

__all__ = [
    "ZERO_ACCOUNT",
    "Account",
    "Amount",
    "AmountTable",
    "StrategyId",
    "DEFAULT_MAX_SUPPLY",
    "TokenLedger",
]
