"""
Claim issuance kernel.

Pure functions over the two reserves of a pair and its claim supply:

* `ratio_deposit` trims a desired deposit to the pool ratio;
* `deposit_claims` issues claims (geometric mean on bootstrap, the smaller of
  the two proportional shares afterwards);
* `withdrawal_amounts` pays out the proportional share of both reserves.

All divisions floor, so rounding dust stays with the existing claim holders.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


def _check_ints(**values: int) -> None:
    for name, v in values.items():
        if not isinstance(v, int) or isinstance(v, bool):
            raise TypeError(f"{name} must be an int")
        if v < 0:
            raise ValueError(f"{name} must be non-negative")


@dataclass(frozen=True)
class ClaimDeposit:
    amount_a: int
    amount_b: int
    claims_minted: int
    claims_locked: int
    total_claims_after: int


@dataclass(frozen=True)
class ClaimWithdrawal:
    amount_a: int
    amount_b: int
    total_claims_after: int


def integer_sqrt(n: int) -> int:
    """Exact ``floor(sqrt(n))`` for non-negative integers of any size."""
    _check_ints(n=n)
    return math.isqrt(n)


def matching_amount(*, amount: int, reserve_from: int, reserve_to: int) -> int:
    """``floor(amount * reserve_to / reserve_from)``: the counter-amount at the current ratio."""
    _check_ints(amount=amount, reserve_from=reserve_from, reserve_to=reserve_to)
    if amount == 0:
        raise ValueError("amount must be positive")
    if reserve_from == 0 or reserve_to == 0:
        raise ValueError("reserves must be positive")
    return (amount * reserve_to) // reserve_from


def ratio_deposit(*, reserve_a: int, reserve_b: int, desired_a: int, desired_b: int) -> Tuple[int, int]:
    """
    Largest deposit at the pool ratio that fits inside ``(desired_a, desired_b)``.

    Side A is tried first; if its matching B exceeds ``desired_b`` the deposit
    is driven by B instead. Either used amount may floor to 0.
    """
    _check_ints(reserve_a=reserve_a, reserve_b=reserve_b, desired_a=desired_a, desired_b=desired_b)
    if reserve_a == 0 or reserve_b == 0:
        return desired_a, desired_b

    b_for_a = matching_amount(amount=desired_a, reserve_from=reserve_a, reserve_to=reserve_b)
    if b_for_a <= desired_b:
        return desired_a, b_for_a
    return matching_amount(amount=desired_b, reserve_from=reserve_b, reserve_to=reserve_a), desired_b


def bootstrap_claims(*, amount_a: int, amount_b: int, locked: int = 0) -> Tuple[int, int]:
    """
    Returns ``(claims to the depositor, total claims)`` for a first deposit.

    The total is ``isqrt(amount_a * amount_b)``; ``locked`` of it is withheld.
    The depositor's share is 0 when the total does not exceed the lock.
    """
    _check_ints(amount_a=amount_a, amount_b=amount_b, locked=locked)
    if amount_a == 0 or amount_b == 0:
        raise ValueError("bootstrap amounts must be positive")
    total = integer_sqrt(amount_a * amount_b)
    return max(total - locked, 0), total


def deposit_claims(
    *,
    reserve_a: int,
    reserve_b: int,
    total_claims: int,
    desired_a: int,
    desired_b: int,
    locked: int = 0,
) -> ClaimDeposit:
    _check_ints(
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        total_claims=total_claims,
        desired_a=desired_a,
        desired_b=desired_b,
    )
    if desired_a == 0 or desired_b == 0:
        raise ValueError("desired amounts must be positive")

    if total_claims == 0:
        if reserve_a or reserve_b:
            raise ValueError("pool without claims still holds reserves")
        minted, total = bootstrap_claims(amount_a=desired_a, amount_b=desired_b, locked=locked)
        return ClaimDeposit(
            amount_a=desired_a,
            amount_b=desired_b,
            claims_minted=minted,
            claims_locked=total - minted,
            total_claims_after=total,
        )

    if reserve_a == 0 or reserve_b == 0:
        raise ValueError("pool with claims has an empty reserve")

    used_a, used_b = ratio_deposit(reserve_a=reserve_a, reserve_b=reserve_b, desired_a=desired_a, desired_b=desired_b)
    minted = min(used_a * total_claims // reserve_a, used_b * total_claims // reserve_b)
    return ClaimDeposit(
        amount_a=used_a,
        amount_b=used_b,
        claims_minted=minted,
        claims_locked=0,
        total_claims_after=total_claims + minted,
    )


def withdrawal_amounts(*, claims: int, reserve_a: int, reserve_b: int, total_claims: int) -> ClaimWithdrawal:
    _check_ints(claims=claims, reserve_a=reserve_a, reserve_b=reserve_b, total_claims=total_claims)
    if claims == 0:
        raise ValueError("claims must be positive")
    if claims > total_claims:
        raise ValueError("cannot burn more than the total claim supply")

    out_a = claims * reserve_a // total_claims
    out_b = claims * reserve_b // total_claims
    remaining = total_claims - claims
    if remaining == 0 and (out_a, out_b) != (reserve_a, reserve_b):
        # floor(T * r / T) == r, so burning the whole supply pays out both reserves.
        raise AssertionError("full burn left reserves behind")
    return ClaimWithdrawal(amount_a=out_a, amount_b=out_b, total_claims_after=remaining)
