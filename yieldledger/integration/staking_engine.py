"""
Stake/reward engine (imperative shell around ``core.staking``).
"""

from __future__ import annotations

from ..core import staking
from ..core.config import StakingParams
from ..core.invariants import check_staking
from ..core.staking import RewardRecord, StakePosition, StakingState
from ..state.ledger import Account, Amount
from .engine import LedgerEngine
from .ports import BlockClock, Governance, TokenTransfer


class StakeRewardEngine(LedgerEngine[StakingState]):
    """Owns lock positions, reward accrual and the shared reward pool."""

    def __init__(
        self,
        token: TokenTransfer,
        clock: BlockClock,
        governance: Governance,
        params: StakingParams | None = None,
        *,
        state: StakingState | None = None,
        verify_invariants: bool = True,
    ) -> None:
        super().__init__(
            state if state is not None else staking.init_staking_state(),
            token=token,
            clock=clock,
            governance=governance,
            check_invariants=check_staking,
            verify_invariants=verify_invariants,
        )
        self.params = params if params is not None else StakingParams()

    @property
    def custody_account(self) -> Account:
        return self.params.custody_account

    # -- Operations ----------------------------------------------------------

    def stake(self, caller: Account, amount: Amount, duration: int) -> int:
        """Returns the amount locked."""
        next_state, receipt = staking.stake(
            self._state, self.params, self.context(caller), amount, duration,
        )
        return self._commit("stake", next_state, receipt).value

    def unstake(self, caller: Account) -> int:
        """Returns the amount paid back after any early-exit penalty."""
        next_state, receipt = staking.unstake(self._state, self.params, self.context(caller))
        return self._commit("unstake", next_state, receipt).value

    def claim_rewards(self, caller: Account) -> int:
        """Returns the reward paid."""
        next_state, receipt = staking.claim_rewards(self._state, self.params, self.context(caller))
        return self._commit("claim_rewards", next_state, receipt).value

    def fund_reward_pool(self, caller: Account, amount: Amount) -> int:
        """Returns the pool balance after funding."""
        next_state, receipt = staking.fund_reward_pool(
            self._state, self.params, self.context(caller), amount,
        )
        self._commit("fund_reward_pool", next_state, receipt)
        return self._state.reward_pool

    # -- Read accessors ------------------------------------------------------

    def position_of(self, account: Account) -> StakePosition | None:
        return staking.position_of(self._state, account)

    def reward_record_of(self, account: Account) -> RewardRecord | None:
        return staking.reward_record_of(self._state, account)

    def pending_reward(self, account: Account) -> int:
        return staking.pending_reward(self._state, self.params, account, self.clock.current_tick())

    @property
    def total_staked(self) -> int:
        return self._state.total_staked

    @property
    def reward_pool(self) -> int:
        return self._state.reward_pool
