"""
Swap execution planning for a single pair.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import InvalidPair, SlippageExceeded, ZeroLiquidity
from ..state.balances import Amount, AssetId
from ..state.pools import PoolRecord
from .pricing import quote_swap_exact_in, quote_swap_exact_out, require_amount


@dataclass(frozen=True)
class SwapPlan:
    asset_in: AssetId
    asset_out: AssetId
    amount_in: Amount
    amount_out: Amount
    fee_amount: Amount
    k_before: int
    k_after: int


def _reserves_in_out(pool: PoolRecord, asset_in: AssetId, asset_out: AssetId) -> tuple[Amount, Amount]:
    if asset_in == asset_out:
        raise InvalidPair(f"asset_in and asset_out are both {asset_in!r}")
    slot_in = pool.key.slot_of(asset_in)
    if pool.key.slot_of(asset_out) == slot_in:
        raise InvalidPair(f"({asset_in!r}, {asset_out!r}) does not match pair {pool.key}")
    if slot_in == 0:
        return pool.reserve_a, pool.reserve_b
    return pool.reserve_b, pool.reserve_a


def plan_swap_exact_in(
    pool: PoolRecord,
    asset_in: AssetId,
    asset_out: AssetId,
    amount_in: Amount,
    amount_out_min: Amount,
    fee: tuple[int, int],
) -> SwapPlan:
    """
    Quote an exact-in swap against the pre-swap reserves.

    Raises:
        InvalidPair, InvalidInput, ZeroLiquidity (output rounds to 0),
        SlippageExceeded (output below amount_out_min)
    """
    require_amount("amount_in", amount_in, positive=True)
    require_amount("amount_out_min", amount_out_min)
    reserve_in, reserve_out = _reserves_in_out(pool, asset_in, asset_out)

    quote = quote_swap_exact_in(amount_in, reserve_in, reserve_out, *fee)
    if quote.amount_out == 0:
        raise ZeroLiquidity(f"swap of {amount_in} {asset_in} outputs nothing")
    if quote.amount_out < amount_out_min:
        raise SlippageExceeded(f"amount of {asset_out} out below minimum", quote.amount_out, amount_out_min)

    return SwapPlan(
        asset_in=asset_in,
        asset_out=asset_out,
        amount_in=quote.amount_in,
        amount_out=quote.amount_out,
        fee_amount=quote.fee_amount,
        k_before=quote.k_before,
        k_after=quote.k_after,
    )


def plan_swap_exact_out(
    pool: PoolRecord,
    asset_in: AssetId,
    asset_out: AssetId,
    amount_out: Amount,
    amount_in_max: Amount,
    fee: tuple[int, int],
) -> SwapPlan:
    """
    Quote an exact-out swap against the pre-swap reserves.

    Raises:
        InvalidPair, InvalidInput (including amount_out >= reserve_out),
        SlippageExceeded (required input above amount_in_max)
    """
    require_amount("amount_out", amount_out, positive=True)
    require_amount("amount_in_max", amount_in_max)
    reserve_in, reserve_out = _reserves_in_out(pool, asset_in, asset_out)

    quote = quote_swap_exact_out(amount_out, reserve_in, reserve_out, *fee)
    if quote.amount_in > amount_in_max:
        raise SlippageExceeded(f"amount of {asset_in} in above maximum", quote.amount_in, amount_in_max)

    return SwapPlan(
        asset_in=asset_in,
        asset_out=asset_out,
        amount_in=quote.amount_in,
        amount_out=quote.amount_out,
        fee_amount=quote.fee_amount,
        k_before=quote.k_before,
        k_after=quote.k_after,
    )


def apply_swap(pool: PoolRecord, plan: SwapPlan) -> None:
    """``reserve_in += amount_in``, ``reserve_out -= amount_out``."""
    if pool.key.slot_of(plan.asset_in) == 0:
        pool.reserve_a += plan.amount_in
        pool.reserve_b -= plan.amount_out
    else:
        pool.reserve_b += plan.amount_in
        pool.reserve_a -= plan.amount_out
