"""
In-memory fungible token ledger.

Reference implementation of the token-transfer port used by the engines,
tests and the scenario runner. Custody accounts are ordinary accounts here.
"""

from __future__ import annotations

from typing import Dict

from ..core.errors import LimitExceededError, ValidationError
from ..core.math import MAX_AMOUNT, TOKEN_UNIT
from .ledger import ZERO_ACCOUNT, Account, Amount, AmountTable

# 1e9 whole tokens at 6 decimals.
DEFAULT_MAX_SUPPLY = 1_000_000_000 * TOKEN_UNIT


class TokenLedger:
    """
    Balance table plus supply tracking.

    ``transfer`` follows the port contract: it returns False and leaves every
    balance unchanged when the sender cannot cover the amount.
    """

    def __init__(self, max_supply: Amount = DEFAULT_MAX_SUPPLY) -> None:
        if not (0 < max_supply <= MAX_AMOUNT):
            raise ValueError(f"max_supply out of range: {max_supply}")
        self.max_supply = max_supply
        self._balances = AmountTable()
        self._total_supply: Amount = 0

    def balance_of(self, account: Account) -> Amount:
        return self._balances.get(account)

    def total_supply(self) -> Amount:
        return self._total_supply

    def mint(self, recipient: Account, amount: Amount) -> None:
        """Create ``amount`` new tokens for ``recipient``."""
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise ValidationError(f"mint amount must be a positive int: {amount!r}")
        if not recipient or recipient == ZERO_ACCOUNT:
            raise ValidationError("cannot mint to the zero account")
        new_supply = self._total_supply + amount
        if new_supply > self.max_supply:
            raise LimitExceededError(f"max supply {self.max_supply} exceeded: {new_supply}")
        self._balances.add(recipient, amount)
        self._total_supply = new_supply

    def transfer(self, amount: Amount, sender: Account, recipient: Account) -> bool:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            return False
        if not recipient or recipient == ZERO_ACCOUNT:
            return False
        if sender == recipient:
            return False
        if self._balances.get(sender) < amount:
            return False
        self._balances.subtract(sender, amount)
        self._balances.add(recipient, amount)
        return True

    def get_all_balances(self) -> Dict[Account, Amount]:
        return self._balances.get_all()  # type: ignore[return-value]

    def snapshot(self) -> tuple[AmountTable, Amount]:
        return self._balances.copy(), self._total_supply

    def restore(self, snapshot: tuple[AmountTable, Amount]) -> None:
        balances, total_supply = snapshot
        self._balances = balances.copy()
        self._total_supply = total_supply

    def __repr__(self) -> str:
        return f"TokenLedger(supply={self._total_supply}, holders={len(self._balances)})"
