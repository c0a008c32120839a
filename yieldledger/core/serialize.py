"""Plain-dict views of ledger state for reports and snapshots.

Rows are sorted by key so the output is deterministic regardless of dict
insertion order.
"""

from __future__ import annotations

from typing import Any

from .staking import StakingState
from .vault import VaultState


def vault_state_to_dict(state: VaultState) -> dict[str, Any]:
    return {
        "total_shares": state.total_shares,
        "total_deposited": state.total_deposited,
        "strategies": {
            sid: {"apy": s.apy, "risk_score": s.risk_score, "active": s.active}
            for sid, s in sorted(state.strategies.items())
        },
        "deposits": dict(sorted(state.deposits.get_all().items())),
        "shares": dict(sorted(state.shares.get_all().items())),
        "allocations": dict(sorted(state.allocations.get_all().items())),
        "strategy_shares": [
            {"owner": owner, "strategy": sid, "shares": amount}
            for (owner, sid), amount in sorted(state.strategy_shares.get_all().items())
        ],
    }


def staking_state_to_dict(state: StakingState) -> dict[str, Any]:
    return {
        "total_staked": state.total_staked,
        "reward_pool": state.reward_pool,
        "positions": {
            owner: {"amount": p.amount, "start_tick": p.start_tick, "duration": p.duration}
            for owner, p in sorted(state.positions.items())
        },
        "rewards": {
            owner: {"accumulated": r.accumulated, "last_claim_tick": r.last_claim_tick}
            for owner, r in sorted(state.rewards.items())
        },
    }
