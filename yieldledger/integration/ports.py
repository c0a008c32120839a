"""
Collaborator ports consumed by the engines.

The engines never reference concrete collaborators. Anything that satisfies
these protocols can be injected: the in-memory ``TokenLedger``,
``ManualClock`` and ``AdminRegistry`` ship as reference implementations.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ..state.ledger import Account, Amount


@runtime_checkable
class TokenTransfer(Protocol):
    def transfer(self, amount: Amount, sender: Account, recipient: Account) -> bool:
        """Move value; False means nothing moved."""
        ...


@runtime_checkable
class BlockClock(Protocol):
    def current_tick(self) -> int:
        ...


@runtime_checkable
class Governance(Protocol):
    def is_authorized(self, caller: Account) -> bool:
        ...

    def is_paused(self) -> bool:
        ...


@runtime_checkable
class Transactional(Protocol):
    """Participant of an atomic unit: can capture and roll back its state."""

    def snapshot(self) -> Any:
        ...

    def restore(self, snapshot: Any) -> None:
        ...


class ManualClock:
    """Monotonic tick counter advanced explicitly by the host (or a test)."""

    def __init__(self, tick: int = 0) -> None:
        if not isinstance(tick, int) or isinstance(tick, bool) or tick < 0:
            raise ValueError(f"tick must be a non-negative int: {tick!r}")
        self._tick = tick

    def current_tick(self) -> int:
        return self._tick

    def advance(self, ticks: int = 1) -> int:
        if not isinstance(ticks, int) or isinstance(ticks, bool) or ticks < 0:
            raise ValueError(f"ticks must be a non-negative int: {ticks!r}")
        self._tick += ticks
        return self._tick

    def set_tick(self, tick: int) -> None:
        if not isinstance(tick, int) or isinstance(tick, bool):
            raise ValueError(f"tick must be an int: {tick!r}")
        if tick < self._tick:
            raise ValueError(f"clock is monotonic: {tick} < {self._tick}")
        self._tick = tick

    def __repr__(self) -> str:
        return f"ManualClock(tick={self._tick})"
