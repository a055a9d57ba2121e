# [TESTER] v1

from __future__ import annotations

import pytest

from pairpool.kernels.python.cpmm_swap import (
    amount_in_exact_out,
    amount_out_exact_in,
    spot_price,
    swap_exact_in,
    swap_exact_out,
)
from pairpool.kernels.python.lp_math import (
    bootstrap_claims,
    deposit_claims,
    integer_sqrt,
    ratio_deposit,
    withdrawal_amounts,
)


def test_exact_in_reference_values() -> None:
    assert amount_out_exact_in(
        amount_in=1000, reserve_in=10_000, reserve_out=10_000, fee_numerator=0, fee_denominator=1000
    ) == 909
    assert amount_out_exact_in(
        amount_in=1000, reserve_in=10_000, reserve_out=10_000, fee_numerator=3, fee_denominator=1000
    ) == 906


def test_exact_in_keeps_fee_in_pool() -> None:
    res = swap_exact_in(reserve_in=10_000, reserve_out=10_000, amount_in=1000, fee_numerator=3, fee_denominator=1000)
    assert res.new_reserve_in == 11_000
    assert res.new_reserve_out == 10_000 - 906
    assert res.fee_amount == 3
    assert res.k_after > res.k_before


def test_exact_out_updates_reserves_for_requested_amount_out() -> None:
    # With reserve_in=1, reserve_out=4 the minimal input over-delivers under exact-in
    # rounding; exact-out must still only release the requested amount.
    res = swap_exact_out(reserve_in=1, reserve_out=4, amount_out=1, fee_numerator=0, fee_denominator=1000)
    assert res.new_reserve_in == 1 + res.amount_in
    assert res.new_reserve_out == 3

    check = amount_out_exact_in(
        amount_in=res.amount_in, reserve_in=1, reserve_out=4, fee_numerator=0, fee_denominator=1000
    )
    assert check >= 1


def test_exact_out_is_minimal() -> None:
    for amount_out in (1, 7, 500, 909, 5000):
        amount_in = amount_in_exact_out(
            amount_out=amount_out, reserve_in=10_000, reserve_out=10_000, fee_numerator=3, fee_denominator=1000
        )
        got = amount_out_exact_in(
            amount_in=amount_in, reserve_in=10_000, reserve_out=10_000, fee_numerator=3, fee_denominator=1000
        )
        assert got >= amount_out
        if amount_in > 1:
            less = amount_out_exact_in(
                amount_in=amount_in - 1, reserve_in=10_000, reserve_out=10_000, fee_numerator=3, fee_denominator=1000
            )
            assert less < amount_out


def test_swap_kernel_rejects_bad_inputs() -> None:
    with pytest.raises(ValueError, match="reserves must be positive"):
        amount_out_exact_in(amount_in=1, reserve_in=0, reserve_out=10, fee_numerator=0, fee_denominator=1000)
    with pytest.raises(ValueError, match="amount_in must be positive"):
        amount_out_exact_in(amount_in=0, reserve_in=10, reserve_out=10, fee_numerator=0, fee_denominator=1000)
    with pytest.raises(ValueError, match="fee_numerator"):
        amount_out_exact_in(amount_in=1, reserve_in=10, reserve_out=10, fee_numerator=1000, fee_denominator=1000)
    with pytest.raises(ValueError, match="drain"):
        amount_in_exact_out(amount_out=10, reserve_in=10, reserve_out=10, fee_numerator=0, fee_denominator=1000)
    with pytest.raises(TypeError):
        amount_out_exact_in(amount_in=1.5, reserve_in=10, reserve_out=10, fee_numerator=0, fee_denominator=1000)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        amount_out_exact_in(amount_in=True, reserve_in=10, reserve_out=10, fee_numerator=0, fee_denominator=1000)


def test_spot_price_kernel() -> None:
    assert spot_price(reserve_a=1000, reserve_b=4000, scale=10**18) == 4 * 10**18
    with pytest.raises(ZeroDivisionError):
        spot_price(reserve_a=0, reserve_b=0, scale=10**18)


def test_integer_sqrt_is_exact_for_huge_values() -> None:
    # Float sqrt loses precision here.
    n = (1 << 70) + 12345
    assert integer_sqrt(n * n) == n
    assert integer_sqrt(n * n - 1) == n - 1


def test_deposit_claims_rejects_reserves_without_claims() -> None:
    with pytest.raises(ValueError, match="without claims"):
        deposit_claims(reserve_a=1, reserve_b=1, total_claims=0, desired_a=10, desired_b=10)


def test_bootstrap_and_lock() -> None:
    res = deposit_claims(reserve_a=0, reserve_b=0, total_claims=0, desired_a=1000, desired_b=4000)
    assert (res.claims_minted, res.claims_locked, res.total_claims_after) == (2000, 0, 2000)

    locked = deposit_claims(reserve_a=0, reserve_b=0, total_claims=0, desired_a=1000, desired_b=4000, locked=1000)
    assert (locked.claims_minted, locked.claims_locked, locked.total_claims_after) == (1000, 1000, 2000)

    assert bootstrap_claims(amount_a=10, amount_b=10, locked=1000) == (0, 10)


def test_ratio_deposit_never_exceeds_desired() -> None:
    for a, b in ((1000, 1), (1, 1000), (333, 777), (10**20, 10**20 + 1)):
        used_a, used_b = ratio_deposit(reserve_a=3000, reserve_b=7000, desired_a=a, desired_b=b)
        assert used_a <= a
        assert used_b <= b


def test_ratio_deposit_takes_the_binding_side() -> None:
    # Ratio 1:4. Desired (100, 1000): B is slack.
    assert ratio_deposit(reserve_a=1000, reserve_b=4000, desired_a=100, desired_b=1000) == (100, 400)
    # Desired (100, 200): B binds.
    assert ratio_deposit(reserve_a=1000, reserve_b=4000, desired_a=100, desired_b=200) == (50, 200)


def test_withdrawing_full_supply_empties_reserves() -> None:
    res = withdrawal_amounts(claims=777, reserve_a=1234, reserve_b=98765, total_claims=777)
    assert (res.amount_a, res.amount_b, res.total_claims_after) == (1234, 98765, 0)

    with pytest.raises(ValueError, match="more than the total claim supply"):
        withdrawal_amounts(claims=778, reserve_a=1234, reserve_b=98765, total_claims=777)
