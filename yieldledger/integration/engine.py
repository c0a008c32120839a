"""
Shared commit protocol for the imperative-shell engines.

Every public engine operation follows the same sequence:

1. Build a ``CallContext`` from the clock and governance ports.
2. Run the pure core transition to get ``(next_state, receipt)``.
3. Check invariants on the post-state.
4. Execute the receipt's single transfer through the token port.
5. Commit ``next_state``.

A failure at any step leaves the engine state and token balances unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, TypeVar

from ..core.errors import InsufficientBalanceError, InvariantViolationError
from ..core.types import CallContext, Receipt
from ..state.ledger import Account
from .ports import BlockClock, Governance, TokenTransfer

logger = logging.getLogger(__name__)

S = TypeVar("S")


class LedgerEngine(Generic[S]):
    def __init__(
        self,
        state: S,
        *,
        token: TokenTransfer,
        clock: BlockClock,
        governance: Governance,
        check_invariants: Callable[[S], list[str]],
        verify_invariants: bool = True,
    ) -> None:
        self._state = state
        self.token = token
        self.clock = clock
        self.governance = governance
        self._check_invariants = check_invariants
        self.verify_invariants = verify_invariants

    @property
    def state(self) -> S:
        return self._state

    def context(self, caller: Account) -> CallContext:
        return CallContext(
            caller=caller,
            tick=self.clock.current_tick(),
            paused=self.governance.is_paused(),
            auth_ok=self.governance.is_authorized(caller),
        )

    def _commit(self, op: str, next_state: S, receipt: Receipt) -> Receipt:
        if self.verify_invariants:
            violations = self._check_invariants(next_state)
            if violations:
                raise InvariantViolationError(violations)

        transfer = receipt.transfer
        if transfer is not None:
            ok = self.token.transfer(transfer.amount, transfer.sender, transfer.recipient)
            if not ok:
                logger.warning(
                    "%s: transfer of %d from %s to %s rejected",
                    op, transfer.amount, transfer.sender, transfer.recipient,
                )
                raise InsufficientBalanceError(
                    f"token transfer of {transfer.amount} from {transfer.sender!r} failed"
                )

        self._state = next_state
        logger.debug("%s committed: value=%d effects=%s", op, receipt.value, dict(receipt.effects))
        return receipt

    def snapshot(self) -> Any:
        return self._state

    def restore(self, snapshot: Any) -> None:
        self._state = snapshot
