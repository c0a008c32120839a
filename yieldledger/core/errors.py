"""Error taxonomy for the vault and staking ledgers.

Every rejection raised by the functional core is a ``LedgerError`` carrying an
``ErrorKind`` tag. Callers that prefer tagged results over exceptions wrap a
call in ``capture()`` and inspect the returned ``OpResult``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")


@unique
class ErrorKind(Enum):
    UNAUTHORIZED = "unauthorized"
    PAUSED = "paused"
    ZERO_OR_BELOW_MINIMUM_AMOUNT = "zero_or_below_minimum_amount"
    INVALID_DURATION = "invalid_duration"
    LIMIT_EXCEEDED = "limit_exceeded"
    STRATEGY_NOT_WHITELISTED = "strategy_not_whitelisted"
    NOT_STAKED = "not_staked"
    ALREADY_STAKED = "already_staked"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    ARITHMETIC_OVERFLOW = "arithmetic_overflow"


class LedgerError(Exception):
    """Base class for rejections that abort an operation with no mutation."""

    kind: ErrorKind

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.kind.value)


class UnauthorizedError(LedgerError):
    kind = ErrorKind.UNAUTHORIZED


class PausedError(LedgerError):
    kind = ErrorKind.PAUSED


class ValidationError(LedgerError):
    """Amount is zero or at/below the configured floor."""

    kind = ErrorKind.ZERO_OR_BELOW_MINIMUM_AMOUNT


class InvalidDurationError(ValidationError):
    kind = ErrorKind.INVALID_DURATION


class LimitExceededError(LedgerError):
    kind = ErrorKind.LIMIT_EXCEEDED


class StrategyNotWhitelistedError(LedgerError):
    kind = ErrorKind.STRATEGY_NOT_WHITELISTED


class NotStakedError(LedgerError):
    kind = ErrorKind.NOT_STAKED


class AlreadyStakedError(LedgerError):
    kind = ErrorKind.ALREADY_STAKED


class InsufficientBalanceError(LedgerError):
    kind = ErrorKind.INSUFFICIENT_BALANCE


class ArithmeticOverflowError(LedgerError):
    kind = ErrorKind.ARITHMETIC_OVERFLOW


class InvariantViolationError(Exception):
    """Raised when a post-state violates one or more ledger invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")


ERROR_TYPES: dict[ErrorKind, type[LedgerError]] = {
    cls.kind: cls
    for cls in (
        UnauthorizedError,
        PausedError,
        ValidationError,
        InvalidDurationError,
        LimitExceededError,
        StrategyNotWhitelistedError,
        NotStakedError,
        AlreadyStakedError,
        InsufficientBalanceError,
        ArithmeticOverflowError,
    )
}


@dataclass(frozen=True)
class OpResult(Generic[T]):
    """Tagged outcome of one ledger operation."""

    ok: bool
    value: T | None = None
    error: ErrorKind | None = None
    message: str | None = None

    def unwrap(self) -> T:
        """Return the value, re-raising the recorded error on rejection."""
        if self.ok:
            return self.value  # type: ignore[return-value]
        assert self.error is not None
        raise ERROR_TYPES[self.error](self.message or "")


def capture(fn: Callable[..., T], *args: Any, **kwargs: Any) -> OpResult[T]:
    """Call ``fn`` and convert a ``LedgerError`` into a rejected ``OpResult``."""
    try:
        return OpResult(ok=True, value=fn(*args, **kwargs))
    except LedgerError as exc:
        return OpResult(ok=False, error=exc.kind, message=str(exc))
