"""
Time-locked staking kernel with cliff-then-linear rewards.

Pure state machine:
- Each account holds at most one open ``StakePosition``.
- Rewards accrue only once the lock has matured, then grow linearly with the
  ticks elapsed since the stake started.
- Early exits pay a penalty that is routed into the shared reward pool.

Claims pay the entitlement accrued since the later of the stake start and
the caller's previous claim, so repeated claims never re-pay the same ticks.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Mapping

from ..state.ledger import Account, Amount
from .config import StakingParams
from .errors import (
    AlreadyStakedError,
    InsufficientBalanceError,
    InvalidDurationError,
    NotStakedError,
    PausedError,
    UnauthorizedError,
    ValidationError,
)
from .math import checked_add, checked_sub, early_exit_penalty, reward_entitlement
from .types import CallContext, Receipt, Transfer, require_external_caller, require_int_param


@dataclass(frozen=True)
class StakePosition:
    amount: int
    start_tick: int
    duration: int

    @property
    def matures_at(self) -> int:
        return self.start_tick + self.duration

    def elapsed(self, tick: int) -> int:
        if tick < self.start_tick:
            raise ValueError(f"tick {tick} precedes stake start {self.start_tick}")
        return tick - self.start_tick


@dataclass(frozen=True)
class RewardRecord:
    """Per-account claim bookkeeping.

    ``accumulated`` is kept for data-model parity and stays 0: claims pay
    everything accrued since ``last_claim_tick`` and reset the record.
    """

    accumulated: int = 0
    last_claim_tick: int = 0


@dataclass(frozen=True)
class StakingState:
    positions: Mapping[Account, StakePosition] = field(default_factory=dict)
    rewards: Mapping[Account, RewardRecord] = field(default_factory=dict)
    total_staked: int = 0
    reward_pool: int = 0

    def __post_init__(self) -> None:
        if self.total_staked < 0:
            raise ValueError("total_staked must be non-negative")
        if self.reward_pool < 0:
            raise ValueError("reward_pool must be non-negative")


def init_staking_state() -> StakingState:
    return StakingState()


# -- Reward helpers ----------------------------------------------------------

def _entitlement_at(position: StakePosition, params: StakingParams, tick: int) -> int:
    return reward_entitlement(
        position.amount, params.reward_rate, position.elapsed(tick), position.duration,
    )


def _accrual_baseline(position: StakePosition, record: RewardRecord | None) -> int:
    if record is None:
        return position.start_tick
    return max(position.start_tick, record.last_claim_tick)


def pending_reward(state: StakingState, params: StakingParams, account: Account, tick: int) -> int:
    """What a claim by ``account`` at ``tick`` would pay (0 without a position)."""
    position = state.positions.get(account)
    record = state.rewards.get(account)
    stored = record.accumulated if record is not None else 0
    if position is None:
        return stored
    baseline = _accrual_baseline(position, record)
    fresh = checked_sub(
        _entitlement_at(position, params, tick),
        _entitlement_at(position, params, baseline),
    )
    return checked_add(fresh, stored)


# -- Operations --------------------------------------------------------------

def stake(
    state: StakingState,
    params: StakingParams,
    ctx: CallContext,
    amount: Amount,
    duration: int,
) -> tuple[StakingState, Receipt]:
    """Open the caller's single stake position."""
    if ctx.paused:
        raise PausedError("staking is paused")
    require_external_caller(ctx, params.custody_account)
    if ctx.caller in state.positions:
        raise AlreadyStakedError(f"{ctx.caller!r} already has an open position")
    require_int_param(amount, "amount")
    require_int_param(duration, "duration")
    if amount <= params.min_stake_amount:
        raise ValidationError(f"stake must exceed {params.min_stake_amount}: {amount}")
    if duration < params.min_stake_duration:
        raise InvalidDurationError(
            f"duration must be at least {params.min_stake_duration}: {duration}"
        )

    new_total = checked_add(state.total_staked, amount)
    positions = dict(state.positions)
    positions[ctx.caller] = StakePosition(amount=amount, start_tick=ctx.tick, duration=duration)

    next_state = replace(state, positions=positions, total_staked=new_total)
    return next_state, Receipt(
        value=amount,
        transfer=Transfer(amount=amount, sender=ctx.caller, recipient=params.custody_account),
        effects={"matures_at": ctx.tick + duration},
    )


def claim_rewards(
    state: StakingState,
    params: StakingParams,
    ctx: CallContext,
) -> tuple[StakingState, Receipt]:
    """Pay the caller's accrued reward from the pool. The position is untouched."""
    if ctx.paused:
        raise PausedError("staking is paused")
    require_external_caller(ctx, params.custody_account)
    if ctx.caller not in state.positions:
        raise NotStakedError(f"{ctx.caller!r} has no open position")

    payable = pending_reward(state, params, ctx.caller, ctx.tick)
    if payable == 0:
        raise ValidationError("no reward accrued")
    if state.reward_pool < payable:
        raise InsufficientBalanceError(f"reward pool {state.reward_pool} < {payable}")

    rewards = dict(state.rewards)
    rewards[ctx.caller] = RewardRecord(accumulated=0, last_claim_tick=ctx.tick)
    next_state = replace(
        state,
        rewards=rewards,
        reward_pool=checked_sub(state.reward_pool, payable),
    )
    return next_state, Receipt(
        value=payable,
        transfer=Transfer(amount=payable, sender=params.custody_account, recipient=ctx.caller),
        effects={"reward_pool_after": next_state.reward_pool},
    )


def unstake(
    state: StakingState,
    params: StakingParams,
    ctx: CallContext,
) -> tuple[StakingState, Receipt]:
    """Close the caller's position, withholding the early-exit penalty."""
    if ctx.paused:
        raise PausedError("staking is paused")
    require_external_caller(ctx, params.custody_account)
    position = state.positions.get(ctx.caller)
    if position is None:
        raise NotStakedError(f"{ctx.caller!r} has no open position")

    penalty = early_exit_penalty(
        position.amount, params.penalty_rate_bps, position.elapsed(ctx.tick), position.duration,
    )
    returned = checked_sub(position.amount, penalty)
    if returned == 0:
        raise ValidationError("penalty consumes the whole stake")

    positions = dict(state.positions)
    del positions[ctx.caller]
    next_state = replace(
        state,
        positions=positions,
        total_staked=checked_sub(state.total_staked, position.amount),
        reward_pool=checked_add(state.reward_pool, penalty),
    )
    return next_state, Receipt(
        value=returned,
        transfer=Transfer(amount=returned, sender=params.custody_account, recipient=ctx.caller),
        effects={"penalty": penalty},
    )


def fund_reward_pool(
    state: StakingState,
    params: StakingParams,
    ctx: CallContext,
    amount: Amount,
) -> tuple[StakingState, Receipt]:
    """Admin top-up of the reward pool."""
    if not ctx.auth_ok:
        raise UnauthorizedError(f"{ctx.caller!r} may not fund the reward pool")
    require_external_caller(ctx, params.custody_account)
    require_int_param(amount, "amount")
    if amount == 0:
        raise ValidationError("funding amount must be positive")

    next_state = replace(state, reward_pool=checked_add(state.reward_pool, amount))
    return next_state, Receipt(
        value=amount,
        transfer=Transfer(amount=amount, sender=ctx.caller, recipient=params.custody_account),
        effects={"reward_pool_after": next_state.reward_pool},
    )


# -- Read accessors ----------------------------------------------------------

def position_of(state: StakingState, account: Account) -> StakePosition | None:
    return state.positions.get(account)


def reward_record_of(state: StakingState, account: Account) -> RewardRecord | None:
    return state.rewards.get(account)
