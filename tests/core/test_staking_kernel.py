"""Tests for yieldledger/core/staking.py: lock positions, cliff rewards, early-exit penalty."""

from dataclasses import replace

import pytest

from yieldledger.core.config import StakingParams
from yieldledger.core.errors import (
    AlreadyStakedError,
    InsufficientBalanceError,
    InvalidDurationError,
    NotStakedError,
    PausedError,
    UnauthorizedError,
    ValidationError,
)
from yieldledger.core.invariants import check_staking
from yieldledger.core import staking
from yieldledger.core.staking import StakingState, init_staking_state
from yieldledger.core.types import CallContext

PARAMS = StakingParams()
START = 1_000


def _ctx(caller: str = "alice", tick: int = START, **kwargs) -> CallContext:
    return CallContext(caller=caller, tick=tick, **kwargs)


def _staked(amount: int = 5_000_000, duration: int = 200, pool: int = 0) -> StakingState:
    s = replace(init_staking_state(), reward_pool=pool)
    s, _ = staking.stake(s, PARAMS, _ctx(), amount, duration)
    assert check_staking(s) == []
    return s


# ---------------------------------------------------------------------------
# stake
# ---------------------------------------------------------------------------

class TestStake:
    def test_opens_position(self):
        s, r = staking.stake(init_staking_state(), PARAMS, _ctx(), 5_000_000, 200)
        pos = staking.position_of(s, "alice")
        assert pos is not None
        assert (pos.amount, pos.start_tick, pos.duration) == (5_000_000, START, 200)
        assert pos.matures_at == START + 200
        assert s.total_staked == 5_000_000
        assert r.value == 5_000_000
        assert r.transfer is not None
        assert r.transfer.recipient == PARAMS.custody_account
        assert r.effects == {"matures_at": START + 200}

    def test_second_stake_always_already_staked(self):
        s = _staked()
        for amount, duration in [(5_000_000, 200), (0, 0), (1, 1), (-5, "x")]:
            with pytest.raises(AlreadyStakedError):
                staking.stake(s, PARAMS, _ctx(), amount, duration)  # type: ignore[arg-type]

    def test_amount_at_minimum_rejected(self):
        with pytest.raises(ValidationError):
            staking.stake(init_staking_state(), PARAMS, _ctx(), PARAMS.min_stake_amount, 200)

    def test_short_duration_rejected(self):
        with pytest.raises(InvalidDurationError) as exc:
            staking.stake(init_staking_state(), PARAMS, _ctx(), 5_000_000, PARAMS.min_stake_duration - 1)
        assert exc.value.kind.value == "invalid_duration"

    def test_minimum_duration_accepted(self):
        s, _ = staking.stake(init_staking_state(), PARAMS, _ctx(), 5_000_000, PARAMS.min_stake_duration)
        assert "alice" in s.positions

    def test_paused(self):
        with pytest.raises(PausedError):
            staking.stake(init_staking_state(), PARAMS, _ctx(paused=True), 5_000_000, 200)

    def test_restake_after_unstake(self):
        s = _staked()
        s, _ = staking.unstake(s, PARAMS, _ctx(tick=START + 200))
        s, _ = staking.stake(s, PARAMS, _ctx(tick=START + 300), 2_000_000, 150)
        assert staking.position_of(s, "alice").start_tick == START + 300  # type: ignore[union-attr]


# ---------------------------------------------------------------------------
# unstake
# ---------------------------------------------------------------------------

class TestUnstake:
    def test_at_maturity_no_penalty(self):
        s, r = staking.unstake(_staked(), PARAMS, _ctx(tick=START + 200))
        assert r.value == 5_000_000
        assert r.effects == {"penalty": 0}
        assert s.positions == {}
        assert s.total_staked == 0
        assert s.reward_pool == 0

    def test_early_exit_penalty_feeds_pool(self):
        s, r = staking.unstake(_staked(), PARAMS, _ctx(tick=START + 100))
        assert r.value == 4_000_000
        assert r.effects == {"penalty": 1_000_000}
        assert s.reward_pool == 1_000_000
        assert r.transfer is not None
        assert r.transfer.amount == 4_000_000
        assert check_staking(s) == []

    def test_not_staked(self):
        with pytest.raises(NotStakedError):
            staking.unstake(init_staking_state(), PARAMS, _ctx())

    def test_full_penalty_rejected(self):
        params = StakingParams(penalty_rate_bps=10_000)
        s, _ = staking.stake(init_staking_state(), params, _ctx(), 5_000_000, 200)
        with pytest.raises(ValidationError):
            staking.unstake(s, params, _ctx(tick=START + 1))

    def test_paused(self):
        with pytest.raises(PausedError):
            staking.unstake(_staked(), PARAMS, _ctx(tick=START + 200, paused=True))


# ---------------------------------------------------------------------------
# claim_rewards
# ---------------------------------------------------------------------------

class TestClaimRewards:
    def test_before_maturity_is_zero_amount(self):
        s = _staked(pool=10 ** 12)
        with pytest.raises(ValidationError):
            staking.claim_rewards(s, PARAMS, _ctx(tick=START + 199))

    def test_at_maturity_pays_full_entitlement(self):
        s = _staked(pool=10 ** 12)
        s2, r = staking.claim_rewards(s, PARAMS, _ctx(tick=START + 200))
        assert r.value == 1_000_000_000
        assert s2.reward_pool == 10 ** 12 - 1_000_000_000
        rec = staking.reward_record_of(s2, "alice")
        assert rec is not None
        assert rec.accumulated == 0
        assert rec.last_claim_tick == START + 200
        # Position is untouched by a claim.
        assert s2.positions == s.positions

    def test_pool_short_changes_nothing(self):
        s = _staked(pool=999_999_999)
        with pytest.raises(InsufficientBalanceError):
            staking.claim_rewards(s, PARAMS, _ctx(tick=START + 200))
        assert s.reward_pool == 999_999_999
        assert s.rewards == {}

    def test_repeated_claim_pays_only_new_interval(self):
        s = _staked(pool=10 ** 12)
        s, first = staking.claim_rewards(s, PARAMS, _ctx(tick=START + 200))
        # Same tick again: nothing new accrued.
        with pytest.raises(ValidationError):
            staking.claim_rewards(s, PARAMS, _ctx(tick=START + 200))
        s, second = staking.claim_rewards(s, PARAMS, _ctx(tick=START + 250))
        assert first.value == 1_000_000_000
        # 5_000_000 * 100 * 50 / 100
        assert second.value == 250_000_000
        assert s.reward_pool == 10 ** 12 - 1_250_000_000

    def test_split_claims_equal_single_claim(self):
        single = staking.pending_reward(_staked(pool=10 ** 12), PARAMS, "alice", START + 400)
        s = _staked(pool=10 ** 12)
        s, a = staking.claim_rewards(s, PARAMS, _ctx(tick=START + 250))
        s, b = staking.claim_rewards(s, PARAMS, _ctx(tick=START + 400))
        assert a.value + b.value == single

    def test_not_staked(self):
        with pytest.raises(NotStakedError):
            staking.claim_rewards(init_staking_state(), PARAMS, _ctx())


class TestPendingReward:
    def test_no_position(self):
        assert staking.pending_reward(init_staking_state(), PARAMS, "alice", START) == 0

    def test_tracks_claims(self):
        s = _staked(pool=10 ** 12)
        assert staking.pending_reward(s, PARAMS, "alice", START + 200) == 1_000_000_000
        s, _ = staking.claim_rewards(s, PARAMS, _ctx(tick=START + 200))
        assert staking.pending_reward(s, PARAMS, "alice", START + 200) == 0


class TestFundRewardPool:
    def test_admin_funds(self):
        s, r = staking.fund_reward_pool(init_staking_state(), PARAMS, _ctx("admin", auth_ok=True), 7_000_000)
        assert s.reward_pool == 7_000_000
        assert r.transfer is not None
        assert r.transfer.sender == "admin"
        assert r.effects == {"reward_pool_after": 7_000_000}

    def test_requires_admin(self):
        with pytest.raises(UnauthorizedError):
            staking.fund_reward_pool(init_staking_state(), PARAMS, _ctx(), 1)

    def test_zero_rejected(self):
        with pytest.raises(ValidationError):
            staking.fund_reward_pool(init_staking_state(), PARAMS, _ctx("admin", auth_ok=True), 0)


class TestCustodyCaller:
    def test_custody_cannot_stake(self):
        with pytest.raises(ValidationError):
            staking.stake(init_staking_state(), PARAMS, _ctx(PARAMS.custody_account), 5_000_000, 200)

    def test_custody_cannot_fund(self):
        ctx = _ctx(PARAMS.custody_account, auth_ok=True)
        with pytest.raises(ValidationError):
            staking.fund_reward_pool(init_staking_state(), PARAMS, ctx, 1_000)

    def test_custody_cannot_claim_or_unstake(self):
        ctx = _ctx(PARAMS.custody_account, tick=START + 200)
        with pytest.raises(ValidationError):
            staking.claim_rewards(_staked(pool=10 ** 12), PARAMS, ctx)
        with pytest.raises(ValidationError):
            staking.unstake(_staked(), PARAMS, ctx)
