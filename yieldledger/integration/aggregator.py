"""
Yield aggregator: sequences vault and staking calls as one atomic unit.

The aggregator owns no share or stake accounting of its own. Beyond
sequencing, it keeps a per-strategy yield report that the admin updates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from ..core.errors import (
    OpResult,
    StrategyNotWhitelistedError,
    UnauthorizedError,
    ValidationError,
    capture,
)
from ..core.math import checked_add
from ..core.types import require_int_param
from ..state.ledger import Account, Amount, StrategyId
from .atomic import atomic
from .ports import Governance, Transactional
from .staking_engine import StakeRewardEngine
from .vault_engine import ShareVaultEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyYield:
    total_yield: int = 0
    last_updated: int = 0


@dataclass(frozen=True)
class DepositAndStakeReceipt:
    shares_minted: int
    amount_staked: int


@dataclass(frozen=True)
class WithdrawAndClaimReceipt:
    shares_burned: int
    rewards_paid: int


class YieldAggregator:
    def __init__(
        self,
        vault: ShareVaultEngine,
        staking: StakeRewardEngine,
        token: Transactional,
        governance: Governance,
    ) -> None:
        self.vault = vault
        self.staking = staking
        self.token = token
        self.governance = governance
        self._strategy_yields: Dict[StrategyId, StrategyYield] = {}
        self._total_yield = 0

    def _participants(self) -> tuple[Transactional, ...]:
        parts: list[Any] = [self.vault, self.staking, self.token, self]
        if isinstance(self.governance, Transactional):
            parts.append(self.governance)
        return tuple(parts)

    # -- Sequenced operations ------------------------------------------------

    def deposit_and_stake(
        self,
        caller: Account,
        amount: Amount,
        strategy_id: StrategyId,
        duration: int,
    ) -> DepositAndStakeReceipt:
        """Deposit ``amount`` into the vault, then lock ``amount`` in staking.

        Both legs draw from the caller's token balance. A failure in the stake
        leg unwinds the deposit and its transfer.
        """
        with atomic(*self._participants()):
            shares = self.vault.deposit(caller, amount, strategy_id)
            staked = self.staking.stake(caller, amount, duration)
        logger.debug("deposit_and_stake by %s: shares=%d staked=%d", caller, shares, staked)
        return DepositAndStakeReceipt(shares_minted=shares, amount_staked=staked)

    def withdraw_and_claim(
        self,
        caller: Account,
        amount: Amount,
        strategy_id: StrategyId,
    ) -> WithdrawAndClaimReceipt:
        """Withdraw principal from the vault, then claim staking rewards."""
        with atomic(*self._participants()):
            burned = self.vault.withdraw(caller, amount, strategy_id)
            rewards = self.staking.claim_rewards(caller)
        logger.debug("withdraw_and_claim by %s: burned=%d rewards=%d", caller, burned, rewards)
        return WithdrawAndClaimReceipt(shares_burned=burned, rewards_paid=rewards)

    def try_deposit_and_stake(
        self, caller: Account, amount: Amount, strategy_id: StrategyId, duration: int,
    ) -> OpResult[DepositAndStakeReceipt]:
        return capture(self.deposit_and_stake, caller, amount, strategy_id, duration)

    def try_withdraw_and_claim(
        self, caller: Account, amount: Amount, strategy_id: StrategyId,
    ) -> OpResult[WithdrawAndClaimReceipt]:
        return capture(self.withdraw_and_claim, caller, amount, strategy_id)

    # -- Yield reporting -----------------------------------------------------

    def record_yield(self, caller: Account, strategy_id: StrategyId, amount: Amount) -> StrategyYield:
        if not self.governance.is_authorized(caller):
            raise UnauthorizedError(f"{caller!r} may not record yield")
        if self.vault.strategy(strategy_id) is None:
            raise StrategyNotWhitelistedError(f"unknown strategy: {strategy_id!r}")
        require_int_param(amount, "amount")
        if amount == 0:
            raise ValidationError("yield amount must be positive")

        current = self._strategy_yields.get(strategy_id, StrategyYield())
        updated = StrategyYield(
            total_yield=checked_add(current.total_yield, amount),
            last_updated=self.vault.clock.current_tick(),
        )
        new_total = checked_add(self._total_yield, amount)
        self._strategy_yields[strategy_id] = updated
        self._total_yield = new_total
        logger.info("yield %d recorded for %s", amount, strategy_id)
        return updated

    def strategy_yield(self, strategy_id: StrategyId) -> StrategyYield | None:
        return self._strategy_yields.get(strategy_id)

    def strategy_yields(self) -> Mapping[StrategyId, StrategyYield]:
        return dict(self._strategy_yields)

    @property
    def total_yield(self) -> int:
        return self._total_yield

    def snapshot(self) -> tuple[Dict[StrategyId, StrategyYield], int]:
        return dict(self._strategy_yields), self._total_yield

    def restore(self, snapshot: tuple[Dict[StrategyId, StrategyYield], int]) -> None:
        yields, total = snapshot
        self._strategy_yields = dict(yields)
        self._total_yield = total
