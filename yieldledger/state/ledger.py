"""
Sparse amount tables for the vault and staking ledgers.

Implements AmountTable[Key] -> Amount, where Key is an account id, a strategy
id, or an (account, strategy) pair.
"""

from __future__ import annotations

from typing import Dict, Hashable, Iterator, Tuple


# Type aliases
Account = str
StrategyId = str
Amount = int  # Non-negative integer in token base units (6 decimals)

# Placeholder account that may never hold admin rights or receive value.
ZERO_ACCOUNT = "0x" + "00" * 20


class AmountTable:
    """
    Mapping key -> non-negative amount.

    Notes:
    - Zero amounts are omitted to keep the table sparse.
    - Do not rely on dict iteration order; sort at serialization boundaries.
    """

    def __init__(self, initial: Dict[Hashable, Amount] | None = None) -> None:
        self._amounts: Dict[Hashable, Amount] = {}
        for key, amount in (initial or {}).items():
            self.set(key, amount)

    def get(self, key: Hashable) -> Amount:
        """Get the amount stored under key. Returns 0 if not found."""
        return self._amounts.get(key, 0)

    def set(self, key: Hashable, amount: Amount) -> None:
        """
        Set the amount stored under key.

        Raises:
            TypeError: If amount is not an int
            ValueError: If amount is negative
        """
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise TypeError(f"Amount must be an int, got {type(amount).__name__}")
        if amount < 0:
            raise ValueError(f"Amount cannot be negative: {amount}")
        if amount == 0:
            self._amounts.pop(key, None)
        else:
            self._amounts[key] = amount

    def add(self, key: Hashable, delta: int) -> None:
        """Add delta to an amount (delta may be negative)."""
        current = self.get(key)
        new_amount = current + delta
        if new_amount < 0:
            raise ValueError(
                f"Insufficient amount: {current} + {delta} = {new_amount} < 0"
            )
        self.set(key, new_amount)

    def subtract(self, key: Hashable, delta: Amount) -> None:
        """Subtract a non-negative amount."""
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(key, -delta)

    def total(self) -> Amount:
        return sum(self._amounts.values())

    def items(self) -> Iterator[Tuple[Hashable, Amount]]:
        return iter(list(self._amounts.items()))

    def get_all(self) -> Dict[Hashable, Amount]:
        """Return a shallow copy of all stored amounts."""
        return dict(self._amounts)

    def copy(self) -> "AmountTable":
        return AmountTable(self._amounts)

    def verify_non_negative(self) -> bool:
        return all(amount >= 0 for amount in self._amounts.values())

    def __len__(self) -> int:
        return len(self._amounts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AmountTable):
            return NotImplemented
        return self._amounts == other._amounts

    def __repr__(self) -> str:
        return f"AmountTable({len(self._amounts)} entries)"
