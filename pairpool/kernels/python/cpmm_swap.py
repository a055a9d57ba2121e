"""
Constant-product swap kernel.

- The fee is a rational ``fee_numerator / fee_denominator`` of the input.
- Pricing uses ``in_after_fee = amount_in * (fee_denominator - fee_numerator)``
  against ``reserve_in * fee_denominator``; the fee itself is never rounded.
- The whole gross input is credited to the pool, so the fee accrues to
  claim holders.

Exact-in outputs floor and exact-out inputs ceil, so rounding always favours
the pool.
"""

from __future__ import annotations

from dataclasses import dataclass


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _check_trade(amount_name: str, amount: int, reserve_in: int, reserve_out: int, fee: tuple[int, int]) -> int:
    """Validate one side of a trade and return the fee-adjusted multiplier ``d - f``."""
    fee_numerator, fee_denominator = fee
    for name, v in (
        (amount_name, amount),
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
        ("fee_numerator", fee_numerator),
        ("fee_denominator", fee_denominator),
    ):
        _require_int(name, v)
    if fee_denominator <= 0:
        raise ValueError("fee_denominator must be positive")
    if not (0 <= fee_numerator < fee_denominator):
        raise ValueError("fee_numerator must be in [0, fee_denominator)")
    if amount <= 0:
        raise ValueError(f"{amount_name} must be positive")
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError("reserves must be positive")
    return fee_denominator - fee_numerator


@dataclass(frozen=True)
class SwapQuote:
    amount_in: int
    amount_out: int
    fee_amount: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int


def amount_out_exact_in(
    *,
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_numerator: int,
    fee_denominator: int,
) -> int:
    """
    ``floor(in_after_fee * reserve_out / (reserve_in * fee_denominator + in_after_fee))``.

    May return 0 for dust inputs; callers decide whether that is acceptable.
    """
    net = _check_trade("amount_in", amount_in, reserve_in, reserve_out, (fee_numerator, fee_denominator))
    in_after_fee = amount_in * net
    return (in_after_fee * reserve_out) // (reserve_in * fee_denominator + in_after_fee)


def amount_in_exact_out(
    *,
    amount_out: int,
    reserve_in: int,
    reserve_out: int,
    fee_numerator: int,
    fee_denominator: int,
) -> int:
    """
    Minimal input that yields at least ``amount_out``:
    ``ceil(reserve_in * amount_out * fee_denominator / ((reserve_out - amount_out) * (fee_denominator - fee_numerator)))``.
    """
    net = _check_trade("amount_out", amount_out, reserve_in, reserve_out, (fee_numerator, fee_denominator))
    if amount_out >= reserve_out:
        raise ValueError("cannot drain full reserve_out")
    numerator = reserve_in * amount_out * fee_denominator
    denominator = (reserve_out - amount_out) * net
    return -(-numerator // denominator)


def _settle(
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    amount_out: int,
    fee_numerator: int,
    fee_denominator: int,
) -> SwapQuote:
    if amount_out >= reserve_out:
        raise ValueError("amount_out exhausts reserve_out")
    new_reserve_in = reserve_in + amount_in
    new_reserve_out = reserve_out - amount_out
    k_before = reserve_in * reserve_out
    k_after = new_reserve_in * new_reserve_out
    if k_after < k_before:
        raise ValueError(f"swap would lower k: {k_after} < {k_before}")
    return SwapQuote(
        amount_in=amount_in,
        amount_out=amount_out,
        # Informational only; the fee is never split out of the reserves.
        fee_amount=(amount_in * fee_numerator) // fee_denominator,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
        k_before=k_before,
        k_after=k_after,
    )


def swap_exact_in(
    *,
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_numerator: int,
    fee_denominator: int,
) -> SwapQuote:
    """
    Exact-in swap quote + post-state.

    Raises ValueError on invalid inputs or if the post-state would lower k.
    """
    amount_out = amount_out_exact_in(
        amount_in=amount_in,
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        fee_numerator=fee_numerator,
        fee_denominator=fee_denominator,
    )
    return _settle(reserve_in, reserve_out, amount_in, amount_out, fee_numerator, fee_denominator)


def swap_exact_out(
    *,
    reserve_in: int,
    reserve_out: int,
    amount_out: int,
    fee_numerator: int,
    fee_denominator: int,
) -> SwapQuote:
    """Exact-out swap quote + post-state. Only ``amount_out`` leaves the pool."""
    amount_in = amount_in_exact_out(
        amount_out=amount_out,
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        fee_numerator=fee_numerator,
        fee_denominator=fee_denominator,
    )
    bought = amount_out_exact_in(
        amount_in=amount_in,
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        fee_numerator=fee_numerator,
        fee_denominator=fee_denominator,
    )
    if bought < amount_out:
        raise ValueError("computed amount_in insufficient for desired amount_out")
    return _settle(reserve_in, reserve_out, amount_in, amount_out, fee_numerator, fee_denominator)


def spot_price(*, reserve_a: int, reserve_b: int, scale: int) -> int:
    """``floor(reserve_b * scale / reserve_a)``: price of one unit of A in B."""
    for name, v in (("reserve_a", reserve_a), ("reserve_b", reserve_b), ("scale", scale)):
        _require_int(name, v)
    if reserve_a < 0 or reserve_b < 0:
        raise ValueError("reserves must be non-negative")
    if scale <= 0:
        raise ValueError("scale must be positive")
    if reserve_a == 0:
        raise ZeroDivisionError("spot price undefined for an empty reserve")
    return (reserve_b * scale) // reserve_a
