"""Property tests: random vault and staking traces keep every invariant.

Uses Hypothesis to fuzz operation sequences through the pure kernels. Rejected
steps must leave the state untouched; accepted steps must pass the invariant
registry.
"""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from yieldledger.core import staking, vault
from yieldledger.core.config import StakingParams, VaultParams
from yieldledger.core.errors import LedgerError
from yieldledger.core.invariants import check_staking, check_vault
from yieldledger.core.serialize import staking_state_to_dict, vault_state_to_dict
from yieldledger.core.types import CallContext

ACCOUNTS = ["alice", "bob", "carol"]
STRATEGIES = ["s1", "s2"]
VAULT_PARAMS = VaultParams(min_deposit=10, max_deposit_per_account=10 ** 9)
STAKING_PARAMS = StakingParams(min_stake_amount=10, min_stake_duration=5)

vault_op = st.tuples(
    st.sampled_from(["deposit", "withdraw", "deactivate"]),
    st.sampled_from(ACCOUNTS),
    st.sampled_from(STRATEGIES),
    st.integers(min_value=0, max_value=10 ** 8),
)

staking_op = st.tuples(
    st.sampled_from(["stake", "unstake", "claim", "fund", "wait"]),
    st.sampled_from(ACCOUNTS),
    st.integers(min_value=0, max_value=10 ** 6),
    st.integers(min_value=0, max_value=50),
)


def _seeded_vault():
    admin = CallContext("admin", auth_ok=True)
    s = vault.init_vault_state()
    for sid in STRATEGIES:
        s, _ = vault.add_strategy(s, admin, sid, 100, 1)
    return s


@settings(max_examples=200, deadline=None)
@given(st.lists(vault_op, max_size=40))
def test_vault_trace_keeps_invariants(ops):
    s = _seeded_vault()
    admin = CallContext("admin", auth_ok=True)
    for name, who, sid, amount in ops:
        before = vault_state_to_dict(s)
        try:
            if name == "deposit":
                s, _ = vault.deposit(s, VAULT_PARAMS, CallContext(who), amount, sid)
            elif name == "withdraw":
                s, _ = vault.withdraw(s, VAULT_PARAMS, CallContext(who), amount, sid)
            else:
                s, _ = vault.deactivate_strategy(s, admin, sid)
        except LedgerError:
            assert vault_state_to_dict(s) == before
        assert check_vault(s) == []
        # No yield enters the vault, so the share price never leaves 1:1.
        assert s.total_shares == s.total_deposited


@settings(max_examples=200, deadline=None)
@given(st.lists(staking_op, max_size=40))
def test_staking_trace_keeps_invariants(ops):
    s = staking.init_staking_state()
    tick = 0
    paid_out = 0
    funded = 0
    penalties = 0
    for name, who, amount, dt in ops:
        ctx = CallContext(who, tick=tick)
        before = staking_state_to_dict(s)
        try:
            if name == "stake":
                s, _ = staking.stake(s, STAKING_PARAMS, ctx, amount, 5 + dt)
            elif name == "unstake":
                s, r = staking.unstake(s, STAKING_PARAMS, ctx)
                penalties += r.effects["penalty"]
            elif name == "claim":
                s, r = staking.claim_rewards(s, STAKING_PARAMS, ctx)
                paid_out += r.value
            elif name == "fund":
                s, _ = staking.fund_reward_pool(
                    s, STAKING_PARAMS, CallContext("admin", tick=tick, auth_ok=True), amount,
                )
                funded += amount
            else:
                tick += dt
        except LedgerError:
            assert staking_state_to_dict(s) == before
        assert check_staking(s) == []
        assert s.reward_pool == funded + penalties - paid_out
