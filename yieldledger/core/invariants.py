"""Invariant checkers for the vault and staking ledgers.

Each function returns True when the invariant holds. ``check_vault()`` and
``check_staking()`` return the list of violated invariant IDs (empty = all pass).
"""

from __future__ import annotations

from collections import defaultdict
from typing import Callable

from .math import MAX_AMOUNT
from .staking import StakingState
from .vault import VaultState


# -- Vault -------------------------------------------------------------------

def inv_shares_sum(s: VaultState) -> bool:
    return s.shares.total() == s.total_shares


def inv_deposits_sum(s: VaultState) -> bool:
    return s.deposits.total() == s.total_deposited


def inv_allocations_sum(s: VaultState) -> bool:
    return s.allocations.total() == s.total_deposited


def inv_strategy_shares_bounded(s: VaultState) -> bool:
    per_owner: dict[str, int] = defaultdict(int)
    for (owner, _strategy_id), amount in s.strategy_shares.items():
        per_owner[owner] += amount
    return all(total <= s.shares.get(owner) for owner, total in per_owner.items())


def inv_allocations_whitelisted(s: VaultState) -> bool:
    return all(strategy_id in s.strategies for strategy_id, _ in s.allocations.items())


def inv_vault_amounts_in_range(s: VaultState) -> bool:
    if not (0 <= s.total_shares <= MAX_AMOUNT and 0 <= s.total_deposited <= MAX_AMOUNT):
        return False
    tables = (s.deposits, s.shares, s.strategy_shares, s.allocations)
    return all(t.verify_non_negative() for t in tables)


# -- Staking -----------------------------------------------------------------

def inv_total_staked_sum(s: StakingState) -> bool:
    return sum(p.amount for p in s.positions.values()) == s.total_staked


def inv_reward_pool_in_range(s: StakingState) -> bool:
    return 0 <= s.reward_pool <= MAX_AMOUNT


def inv_positions_well_formed(s: StakingState) -> bool:
    return all(p.amount > 0 and p.duration >= 0 and p.start_tick >= 0 for p in s.positions.values())


def inv_reward_records_non_negative(s: StakingState) -> bool:
    return all(r.accumulated >= 0 and r.last_claim_tick >= 0 for r in s.rewards.values())


# ---------------------------------------------------------------------------
# Registry + check_*
# ---------------------------------------------------------------------------

VAULT_INVARIANTS: dict[str, Callable[[VaultState], bool]] = {
    "inv_shares_sum": inv_shares_sum,
    "inv_deposits_sum": inv_deposits_sum,
    "inv_allocations_sum": inv_allocations_sum,
    "inv_strategy_shares_bounded": inv_strategy_shares_bounded,
    "inv_allocations_whitelisted": inv_allocations_whitelisted,
    "inv_vault_amounts_in_range": inv_vault_amounts_in_range,
}

STAKING_INVARIANTS: dict[str, Callable[[StakingState], bool]] = {
    "inv_total_staked_sum": inv_total_staked_sum,
    "inv_reward_pool_in_range": inv_reward_pool_in_range,
    "inv_positions_well_formed": inv_positions_well_formed,
    "inv_reward_records_non_negative": inv_reward_records_non_negative,
}


def check_vault(state: VaultState) -> list[str]:
    """Return list of violated vault invariant IDs (empty = all pass)."""
    return [inv_id for inv_id, check_fn in VAULT_INVARIANTS.items() if not check_fn(state)]


def check_staking(state: StakingState) -> list[str]:
    """Return list of violated staking invariant IDs (empty = all pass)."""
    return [inv_id for inv_id, check_fn in STAKING_INVARIANTS.items() if not check_fn(state)]
