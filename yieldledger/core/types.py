"""Shared value types for the functional core.

All types are frozen dataclasses (immutable).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from ..state.ledger import Account, Amount
from .errors import ValidationError


@dataclass(frozen=True)
class CallContext:
    """Everything an operation may know about its caller and environment.

    Built by the shell from the clock and governance ports for each call;
    the core never reads ambient state.
    """

    caller: Account
    tick: int = 0
    paused: bool = False
    auth_ok: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.caller, str) or not self.caller:
            raise ValidationError(f"caller must be a non-empty string: {self.caller!r}")
        if not isinstance(self.tick, int) or isinstance(self.tick, bool) or self.tick < 0:
            raise ValueError(f"tick must be a non-negative int: {self.tick!r}")


@dataclass(frozen=True)
class Transfer:
    """One outbound token movement requested by an operation."""

    amount: Amount
    sender: Account
    recipient: Account


@dataclass(frozen=True)
class Receipt:
    """Result of a successful core operation.

    ``value`` is the operation's return value (shares minted, amount paid, ...).
    ``transfer`` is the single token movement the shell must execute before
    committing, if any.
    """

    value: int = 0
    transfer: Transfer | None = None
    effects: Mapping[str, int] = field(default_factory=dict)


def require_int_param(v: object, name: str) -> None:
    """Reject non-int or negative operation parameters as validation errors."""
    if not isinstance(v, int) or isinstance(v, bool):
        raise ValidationError(f"{name} must be an int, got {type(v).__name__}")
    if v < 0:
        raise ValidationError(f"{name} must be non-negative: {v}")


def require_external_caller(ctx: CallContext, custody_account: Account) -> None:
    """Custody accounts hold pooled value and may not act as depositors or stakers."""
    if ctx.caller == custody_account:
        raise ValidationError(f"custody account {custody_account!r} may not be the caller")
