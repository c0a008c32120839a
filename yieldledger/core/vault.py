"""
Share vault kernel: pooled deposits -> proportional shares.

This is a pure state machine intended for the functional core:
- Inputs are integers plus an explicit ``CallContext``.
- Outputs are (next_state, receipt) or a raised ``LedgerError``.
- The input state is never mutated; tables are copied before any write.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Mapping

from ..state.ledger import Account, Amount, AmountTable, StrategyId
from .config import VaultParams
from .errors import (
    InsufficientBalanceError,
    LimitExceededError,
    PausedError,
    StrategyNotWhitelistedError,
    UnauthorizedError,
    ValidationError,
)
from .math import checked_add, checked_sub, shares_for_deposit, shares_for_withdrawal
from .types import CallContext, Receipt, Transfer, require_external_caller, require_int_param


@dataclass(frozen=True)
class Strategy:
    """Whitelisted yield destination. APY and risk are metadata only."""

    apy: int
    risk_score: int
    active: bool = True

    def __post_init__(self) -> None:
        for name in ("apy", "risk_score"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool) or v < 0:
                raise ValueError(f"{name} must be a non-negative int: {v!r}")


@dataclass(frozen=True)
class VaultState:
    """Vault state.

    Table keys:
    - ``deposits`` / ``shares``: account
    - ``strategy_shares``: (account, strategy_id)
    - ``allocations``: strategy_id
    """

    deposits: AmountTable = field(default_factory=AmountTable)
    shares: AmountTable = field(default_factory=AmountTable)
    strategy_shares: AmountTable = field(default_factory=AmountTable)
    allocations: AmountTable = field(default_factory=AmountTable)
    strategies: Mapping[StrategyId, Strategy] = field(default_factory=dict)
    total_shares: int = 0
    total_deposited: int = 0

    def __post_init__(self) -> None:
        if self.total_shares < 0:
            raise ValueError("total_shares must be non-negative")
        if self.total_deposited < 0:
            raise ValueError("total_deposited must be non-negative")


def init_vault_state() -> VaultState:
    return VaultState()


# -- Operations --------------------------------------------------------------

def deposit(
    state: VaultState,
    params: VaultParams,
    ctx: CallContext,
    amount: Amount,
    strategy_id: StrategyId,
) -> tuple[VaultState, Receipt]:
    """Deposit ``amount`` into ``strategy_id`` and mint shares to the caller."""
    if ctx.paused:
        raise PausedError("vault is paused")
    require_external_caller(ctx, params.custody_account)
    require_int_param(amount, "amount")
    if amount <= params.min_deposit:
        raise ValidationError(f"deposit must exceed {params.min_deposit}: {amount}")
    strategy = state.strategies.get(strategy_id)
    if strategy is None or not strategy.active:
        raise StrategyNotWhitelistedError(f"strategy not active: {strategy_id!r}")

    caller = ctx.caller
    new_deposit = checked_add(state.deposits.get(caller), amount)
    if new_deposit > params.max_deposit_per_account:
        raise LimitExceededError(
            f"deposit ceiling {params.max_deposit_per_account} exceeded: {new_deposit}"
        )

    minted = shares_for_deposit(amount, state.total_shares, state.total_deposited)
    if minted == 0:
        raise ValidationError("deposit too small to mint a share")

    key = (caller, strategy_id)
    new_shares = checked_add(state.shares.get(caller), minted)
    new_strategy_shares = checked_add(state.strategy_shares.get(key), minted)
    new_allocation = checked_add(state.allocations.get(strategy_id), amount)
    new_total_deposited = checked_add(state.total_deposited, amount)
    new_total_shares = checked_add(state.total_shares, minted)

    deposits = state.deposits.copy()
    shares = state.shares.copy()
    strategy_shares = state.strategy_shares.copy()
    allocations = state.allocations.copy()
    deposits.set(caller, new_deposit)
    shares.set(caller, new_shares)
    strategy_shares.set(key, new_strategy_shares)
    allocations.set(strategy_id, new_allocation)

    next_state = replace(
        state,
        deposits=deposits,
        shares=shares,
        strategy_shares=strategy_shares,
        allocations=allocations,
        total_shares=new_total_shares,
        total_deposited=new_total_deposited,
    )
    return next_state, Receipt(
        value=minted,
        transfer=Transfer(amount=amount, sender=caller, recipient=params.custody_account),
        effects={"shares_minted": minted, "deposit_after": new_deposit},
    )


def withdraw(
    state: VaultState,
    params: VaultParams,
    ctx: CallContext,
    amount: Amount,
    strategy_id: StrategyId,
) -> tuple[VaultState, Receipt]:
    """Withdraw ``amount`` of principal from ``strategy_id`` and burn shares.

    Deactivated strategies still accept withdrawals so minted shares stay
    redeemable.
    """
    if ctx.paused:
        raise PausedError("vault is paused")
    require_external_caller(ctx, params.custody_account)
    require_int_param(amount, "amount")
    if amount <= 0:
        raise ValidationError("withdraw amount must be positive")
    if strategy_id not in state.strategies:
        raise StrategyNotWhitelistedError(f"unknown strategy: {strategy_id!r}")

    caller = ctx.caller
    current_deposit = state.deposits.get(caller)
    if current_deposit < amount:
        raise InsufficientBalanceError(f"deposit {current_deposit} < {amount}")

    # A prior deposit guarantees total_shares > 0 and total_deposited > 0.
    burned = shares_for_withdrawal(amount, state.total_shares, state.total_deposited)
    key = (caller, strategy_id)
    held = state.strategy_shares.get(key)
    if held < burned:
        raise InsufficientBalanceError(f"strategy shares {held} < {burned}")

    new_deposit = checked_sub(current_deposit, amount)
    new_shares = checked_sub(state.shares.get(caller), burned)
    new_strategy_shares = checked_sub(held, burned)
    new_allocation = checked_sub(state.allocations.get(strategy_id), amount)
    new_total_deposited = checked_sub(state.total_deposited, amount)
    new_total_shares = checked_sub(state.total_shares, burned)

    deposits = state.deposits.copy()
    shares = state.shares.copy()
    strategy_shares = state.strategy_shares.copy()
    allocations = state.allocations.copy()
    deposits.set(caller, new_deposit)
    shares.set(caller, new_shares)
    strategy_shares.set(key, new_strategy_shares)
    allocations.set(strategy_id, new_allocation)

    next_state = replace(
        state,
        deposits=deposits,
        shares=shares,
        strategy_shares=strategy_shares,
        allocations=allocations,
        total_shares=new_total_shares,
        total_deposited=new_total_deposited,
    )
    return next_state, Receipt(
        value=burned,
        transfer=Transfer(amount=amount, sender=params.custody_account, recipient=caller),
        effects={"shares_burned": burned, "deposit_after": new_deposit},
    )


def add_strategy(
    state: VaultState,
    ctx: CallContext,
    strategy_id: StrategyId,
    apy: int,
    risk_score: int,
) -> tuple[VaultState, Receipt]:
    """Upsert a whitelist entry as active."""
    if not ctx.auth_ok:
        raise UnauthorizedError(f"{ctx.caller!r} may not manage strategies")
    if not isinstance(strategy_id, str) or not strategy_id:
        raise ValidationError("strategy id must be a non-empty string")
    try:
        entry = Strategy(apy=apy, risk_score=risk_score, active=True)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    strategies = dict(state.strategies)
    strategies[strategy_id] = entry
    return replace(state, strategies=strategies), Receipt(value=1)


def deactivate_strategy(
    state: VaultState,
    ctx: CallContext,
    strategy_id: StrategyId,
) -> tuple[VaultState, Receipt]:
    """Stop new deposits into a strategy. Allocations and shares are untouched."""
    if not ctx.auth_ok:
        raise UnauthorizedError(f"{ctx.caller!r} may not manage strategies")
    current = state.strategies.get(strategy_id)
    if current is None:
        raise StrategyNotWhitelistedError(f"unknown strategy: {strategy_id!r}")
    strategies = dict(state.strategies)
    strategies[strategy_id] = replace(current, active=False)
    return replace(state, strategies=strategies), Receipt(value=1)


# -- Read accessors ----------------------------------------------------------

def deposit_of(state: VaultState, account: Account) -> Amount:
    return state.deposits.get(account)


def shares_of(state: VaultState, account: Account) -> Amount:
    return state.shares.get(account)


def strategy_shares_of(state: VaultState, account: Account, strategy_id: StrategyId) -> Amount:
    return state.strategy_shares.get((account, strategy_id))


def allocation_of(state: VaultState, strategy_id: StrategyId) -> Amount:
    return state.allocations.get(strategy_id)


def preview_deposit(state: VaultState, amount: Amount) -> int:
    """Shares a deposit of ``amount`` would mint at the current price."""
    return shares_for_deposit(amount, state.total_shares, state.total_deposited)


def preview_withdraw(state: VaultState, amount: Amount) -> int:
    """Shares a withdrawal of ``amount`` would burn; 0 for an empty vault."""
    if state.total_shares == 0:
        return 0
    return shares_for_withdrawal(amount, state.total_shares, state.total_deposited)
