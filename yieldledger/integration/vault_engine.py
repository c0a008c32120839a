"""
Share vault engine (imperative shell around ``core.vault``).
"""

from __future__ import annotations

from ..core import vault
from ..core.config import VaultParams
from ..core.invariants import check_vault
from ..core.vault import Strategy, VaultState
from ..state.ledger import Account, Amount, StrategyId
from .engine import LedgerEngine
from .ports import BlockClock, Governance, TokenTransfer


class ShareVaultEngine(LedgerEngine[VaultState]):
    """Owns pooled deposits, the strategy whitelist and share accounting."""

    def __init__(
        self,
        token: TokenTransfer,
        clock: BlockClock,
        governance: Governance,
        params: VaultParams | None = None,
        *,
        state: VaultState | None = None,
        verify_invariants: bool = True,
    ) -> None:
        super().__init__(
            state if state is not None else vault.init_vault_state(),
            token=token,
            clock=clock,
            governance=governance,
            check_invariants=check_vault,
            verify_invariants=verify_invariants,
        )
        self.params = params if params is not None else VaultParams()

    @property
    def custody_account(self) -> Account:
        return self.params.custody_account

    # -- Operations ----------------------------------------------------------

    def deposit(self, caller: Account, amount: Amount, strategy_id: StrategyId) -> int:
        """Returns the number of shares minted."""
        next_state, receipt = vault.deposit(
            self._state, self.params, self.context(caller), amount, strategy_id,
        )
        return self._commit("deposit", next_state, receipt).value

    def withdraw(self, caller: Account, amount: Amount, strategy_id: StrategyId) -> int:
        """Returns the number of shares burned."""
        next_state, receipt = vault.withdraw(
            self._state, self.params, self.context(caller), amount, strategy_id,
        )
        return self._commit("withdraw", next_state, receipt).value

    def add_strategy(self, caller: Account, strategy_id: StrategyId, apy: int, risk_score: int) -> None:
        next_state, receipt = vault.add_strategy(
            self._state, self.context(caller), strategy_id, apy, risk_score,
        )
        self._commit("add_strategy", next_state, receipt)

    def deactivate_strategy(self, caller: Account, strategy_id: StrategyId) -> None:
        next_state, receipt = vault.deactivate_strategy(self._state, self.context(caller), strategy_id)
        self._commit("deactivate_strategy", next_state, receipt)

    # -- Read accessors ------------------------------------------------------

    def deposit_of(self, account: Account) -> Amount:
        return vault.deposit_of(self._state, account)

    def shares_of(self, account: Account) -> Amount:
        return vault.shares_of(self._state, account)

    def strategy_shares_of(self, account: Account, strategy_id: StrategyId) -> Amount:
        return vault.strategy_shares_of(self._state, account, strategy_id)

    def allocation_of(self, strategy_id: StrategyId) -> Amount:
        return vault.allocation_of(self._state, strategy_id)

    def strategy(self, strategy_id: StrategyId) -> Strategy | None:
        return self._state.strategies.get(strategy_id)

    def preview_deposit(self, amount: Amount) -> int:
        return vault.preview_deposit(self._state, amount)

    def preview_withdraw(self, amount: Amount) -> int:
        return vault.preview_withdraw(self._state, amount)

    @property
    def total_shares(self) -> int:
        return self._state.total_shares

    @property
    def total_deposited(self) -> int:
        return self._state.total_deposited
