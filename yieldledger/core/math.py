"""Checked integer arithmetic for the vault and staking ledgers.

Every function is stateless and operates on plain Python ints.

Python ints never wrap, so overflow is defined against ``MAX_AMOUNT`` (an
unsigned 128-bit ledger word). Sums, products and differences that leave
``[0, MAX_AMOUNT]`` raise ``ArithmeticOverflowError``.

Rounding is explicit: every division goes through ``floor_div`` or
``mul_div_floor``. All operands are non-negative, so floor equals truncation
toward zero.
"""

from __future__ import annotations

from .errors import ArithmeticOverflowError

TOKEN_DECIMALS: int = 6
TOKEN_UNIT: int = 10 ** TOKEN_DECIMALS
MAX_AMOUNT: int = 2 ** 128 - 1
PERCENT_SCALE: int = 100
BPS_SCALE: int = 10_000


# -- Checked primitives ------------------------------------------------------

def _require_amount(x: int, name: str) -> None:
    if not isinstance(x, int) or isinstance(x, bool):
        raise TypeError(f"{name} must be an int, got {type(x).__name__}")
    if x < 0 or x > MAX_AMOUNT:
        raise ArithmeticOverflowError(f"{name} out of range: {x}")


def checked_add(a: int, b: int) -> int:
    _require_amount(a, "lhs")
    _require_amount(b, "rhs")
    result = a + b
    if result > MAX_AMOUNT:
        raise ArithmeticOverflowError(f"overflow: {a} + {b}")
    return result


def checked_sub(a: int, b: int) -> int:
    _require_amount(a, "lhs")
    _require_amount(b, "rhs")
    if b > a:
        raise ArithmeticOverflowError(f"underflow: {a} - {b}")
    return a - b


def checked_mul(a: int, b: int) -> int:
    _require_amount(a, "lhs")
    _require_amount(b, "rhs")
    result = a * b
    if result > MAX_AMOUNT:
        raise ArithmeticOverflowError(f"overflow: {a} * {b}")
    return result


def floor_div(numerator: int, denominator: int) -> int:
    """``floor(numerator / denominator)``; a zero denominator is an arithmetic fault."""
    _require_amount(numerator, "numerator")
    _require_amount(denominator, "denominator")
    if denominator == 0:
        raise ArithmeticOverflowError("division by zero")
    return numerator // denominator


def mul_div_floor(a: int, b: int, denominator: int) -> int:
    """``floor(a * b / denominator)`` with a checked intermediate product."""
    return floor_div(checked_mul(a, b), denominator)


# -- Share math --------------------------------------------------------------

def shares_for_deposit(amount: int, total_shares: int, total_deposited: int) -> int:
    """Shares minted for a deposit of ``amount``.

    Empty vault bootstraps 1:1. Otherwise ``floor(amount * S / D)``: flooring
    never over-mints, so rounding loss stays with existing holders.
    """
    if total_shares == 0:
        _require_amount(amount, "amount")
        return amount
    return mul_div_floor(amount, total_shares, total_deposited)


def shares_for_withdrawal(amount: int, total_shares: int, total_deposited: int) -> int:
    """Shares burned for a withdrawal of ``amount``: ``floor(amount * S / D)``."""
    return mul_div_floor(amount, total_shares, total_deposited)


# -- Staking math ------------------------------------------------------------

def reward_entitlement(amount: int, reward_rate: int, elapsed: int, duration: int) -> int:
    """Cumulative reward after ``elapsed`` ticks.

    Cliff then linear: 0 before the lock matures, then
    ``floor(amount * reward_rate * elapsed / 100)``.
    """
    if elapsed < duration:
        return 0
    return mul_div_floor(checked_mul(amount, reward_rate), elapsed, PERCENT_SCALE)


def early_exit_penalty(amount: int, penalty_rate_bps: int, elapsed: int, duration: int) -> int:
    """``floor(amount * penalty_bps / 10_000)`` before maturity, else 0."""
    if elapsed >= duration:
        return 0
    return mul_div_floor(amount, penalty_rate_bps, BPS_SCALE)
