"""
Pricing engine: pure constant-product quotes.

This module is the typed boundary over `pairpool.kernels.python`: kernel
ValueError/TypeError become `InvalidInput` (or `EmptyReserve` for prices
against an empty reserve). Nothing here touches pool state.

Integers are Python ints (arbitrary precision), so ``amount * reserve``
products never overflow. Amounts crossing the public surface must still fit
the 256-bit range of the reference pools.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from ..errors import EmptyReserve, InvalidInput
from ..kernels.python import cpmm_swap as _swap_kernel
from ..kernels.python import lp_math as _lp_kernel
from ..kernels.python.cpmm_swap import SwapQuote
from ..state.balances import Amount, UINT256_MAX

T = TypeVar("T")


def require_amount(name: str, value: object, *, positive: bool = False) -> int:
    """
    Validate a caller-supplied amount and return it.

    Raises:
        InvalidInput: non-int (bools and floats included), negative, zero when
            ``positive`` is set, or above 2**256 - 1
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidInput(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise InvalidInput(f"{name} must be non-negative: {value}")
    if positive and value == 0:
        raise InvalidInput(f"{name} must be positive")
    if value > UINT256_MAX:
        raise InvalidInput(f"{name} exceeds 256-bit range")
    return value


def _kernel_call(fn: Callable[..., T], **kwargs: int) -> T:
    try:
        return fn(**kwargs)
    except ZeroDivisionError as exc:
        raise EmptyReserve(str(exc)) from exc
    except (TypeError, ValueError) as exc:
        raise InvalidInput(str(exc)) from exc


def quote_output(
    amount_in: Amount,
    reserve_in: Amount,
    reserve_out: Amount,
    fee_numerator: int,
    fee_denominator: int,
) -> Amount:
    """
    Output amount for an exact input (constant product, fee kept in the pool).

    Formula:
        in_after_fee = amount_in * (fee_denominator - fee_numerator)
        amount_out = in_after_fee * reserve_out // (reserve_in * fee_denominator + in_after_fee)

    Raises:
        InvalidInput: if amount_in, reserve_in or reserve_out is not positive,
            or the fee is not in [0, fee_denominator)
    """
    return _kernel_call(
        _swap_kernel.amount_out_exact_in,
        amount_in=amount_in,
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        fee_numerator=fee_numerator,
        fee_denominator=fee_denominator,
    )


def quote_input(
    amount_out: Amount,
    reserve_in: Amount,
    reserve_out: Amount,
    fee_numerator: int,
    fee_denominator: int,
) -> Amount:
    """
    Minimal input for which `quote_output` returns at least ``amount_out``.

    Raises:
        InvalidInput: if any amount is not positive or amount_out >= reserve_out
    """
    return _kernel_call(
        _swap_kernel.amount_in_exact_out,
        amount_out=amount_out,
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        fee_numerator=fee_numerator,
        fee_denominator=fee_denominator,
    )


def quote_swap_exact_in(
    amount_in: Amount,
    reserve_in: Amount,
    reserve_out: Amount,
    fee_numerator: int,
    fee_denominator: int,
) -> SwapQuote:
    """`quote_output` plus the post-swap reserves and k before/after."""
    return _kernel_call(
        _swap_kernel.swap_exact_in,
        amount_in=amount_in,
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        fee_numerator=fee_numerator,
        fee_denominator=fee_denominator,
    )


def quote_swap_exact_out(
    amount_out: Amount,
    reserve_in: Amount,
    reserve_out: Amount,
    fee_numerator: int,
    fee_denominator: int,
) -> SwapQuote:
    """`quote_input` plus the post-swap reserves and k before/after."""
    return _kernel_call(
        _swap_kernel.swap_exact_out,
        amount_out=amount_out,
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        fee_numerator=fee_numerator,
        fee_denominator=fee_denominator,
    )


def quote_matching_deposit(amount_a_desired: Amount, reserve_a: Amount, reserve_b: Amount) -> Amount:
    """
    Amount of B matching ``amount_a_desired`` of A at the current ratio:
    ``floor(amount_a_desired * reserve_b / reserve_a)``.

    Only meaningful for a funded pool; empty pools bootstrap instead.
    """
    return _kernel_call(
        _lp_kernel.matching_amount, amount=amount_a_desired, reserve_from=reserve_a, reserve_to=reserve_b
    )


def spot_price(reserve_a: Amount, reserve_b: Amount, scale: int) -> int:
    """
    Price of one unit of A in units of B, scaled: ``floor(reserve_b * scale / reserve_a)``.

    Raises:
        EmptyReserve: if reserve_a == 0
    """
    return _kernel_call(_swap_kernel.spot_price, reserve_a=reserve_a, reserve_b=reserve_b, scale=scale)


def integer_sqrt(n: int) -> int:
    return _kernel_call(_lp_kernel.integer_sqrt, n=n)
