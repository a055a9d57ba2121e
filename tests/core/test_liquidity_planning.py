# [TESTER] v1

from __future__ import annotations

import pytest

from pairpool.core.liquidity import (
    LOCKED_CLAIMS_HOLDER,
    apply_deposit,
    apply_withdrawal,
    plan_add_liquidity,
    plan_remove_liquidity,
)
from pairpool.core.swap import apply_swap, plan_swap_exact_in, plan_swap_exact_out
from pairpool.errors import InsufficientClaim, InvalidInput, InvalidPair, SlippageExceeded, ZeroLiquidity
from pairpool.state import PoolRecord, derive_key


def _funded_pool(reserve_a: int, reserve_b: int, holder: str = "alice") -> PoolRecord:
    pool = PoolRecord(key=derive_key("tokenA", "tokenB"))
    plan = plan_add_liquidity(pool, reserve_a, reserve_b, 0, 0)
    apply_deposit(pool, plan, holder)
    return pool


def test_bootstrap_mints_geometric_mean() -> None:
    pool = PoolRecord(key=derive_key("tokenA", "tokenB"))
    plan = plan_add_liquidity(pool, 1000, 4000, 0, 0)
    assert plan.bootstrap is True
    assert (plan.amount_a, plan.amount_b, plan.liquidity_minted) == (1000, 4000, 2000)

    apply_deposit(pool, plan, "alice")
    assert pool.reserves == (1000, 4000)
    assert pool.total_claims == 2000
    assert pool.claim_of("alice") == 2000
    assert pool.check_invariants() == []


def test_bootstrap_with_locked_minimum() -> None:
    pool = PoolRecord(key=derive_key("tokenA", "tokenB"))
    plan = plan_add_liquidity(pool, 1000, 4000, 0, 0, minimum_liquidity=1000)
    apply_deposit(pool, plan, "alice")
    assert pool.claim_of("alice") == 1000
    assert pool.claim_of(LOCKED_CLAIMS_HOLDER) == 1000
    assert pool.total_claims == 2000
    assert pool.check_invariants() == []

    empty = PoolRecord(key=derive_key("tokenA", "tokenB"))
    with pytest.raises(ZeroLiquidity):
        plan_add_liquidity(empty, 100, 100, 0, 0, minimum_liquidity=1000)


def test_subsequent_deposit_is_ratio_preserving() -> None:
    pool = _funded_pool(1000, 4000)
    plan = plan_add_liquidity(pool, 100, 1000, 0, 0)
    assert (plan.amount_a, plan.amount_b) == (100, 400)
    assert plan.liquidity_minted == min(100 * 2000 // 1000, 400 * 2000 // 4000) == 200

    plan = plan_add_liquidity(pool, 100, 200, 0, 0)
    assert (plan.amount_a, plan.amount_b) == (50, 200)
    assert plan.liquidity_minted == 100


def test_deposit_minimums_are_enforced() -> None:
    pool = _funded_pool(1000, 4000)
    with pytest.raises(SlippageExceeded) as info:
        plan_add_liquidity(pool, 100, 200, 51, 0)
    assert (info.value.actual, info.value.bound) == (50, 51)
    assert plan_add_liquidity(pool, 100, 200, 50, 200).amount_a == 50


def test_dust_deposit_is_zero_liquidity() -> None:
    pool = _funded_pool(1000, 4000)
    # 1 unit of B matches 0 units of A at this ratio.
    with pytest.raises(ZeroLiquidity):
        plan_add_liquidity(pool, 5, 1, 0, 0)


def test_deposit_rejects_bad_amounts() -> None:
    pool = PoolRecord(key=derive_key("tokenA", "tokenB"))
    with pytest.raises(InvalidInput):
        plan_add_liquidity(pool, 0, 10, 0, 0)
    with pytest.raises(InvalidInput):
        plan_add_liquidity(pool, 10, 10, -1, 0)


def test_withdrawal_is_proportional_and_floors() -> None:
    pool = _funded_pool(1000, 4000)
    plan = plan_remove_liquidity(pool, "alice", 333, 0, 0)
    assert plan.amount_a == 333 * 1000 // 2000 == 166
    assert plan.amount_b == 333 * 4000 // 2000 == 666

    apply_withdrawal(pool, plan, "alice")
    assert pool.reserves == (834, 3334)
    assert pool.total_claims == 1667
    assert pool.check_invariants() == []


def test_withdrawal_guards() -> None:
    pool = _funded_pool(1000, 4000)
    with pytest.raises(InsufficientClaim) as info:
        plan_remove_liquidity(pool, "bob", 1, 0, 0)
    assert info.value.held == 0
    with pytest.raises(InsufficientClaim):
        plan_remove_liquidity(pool, "alice", 2001, 0, 0)
    with pytest.raises(SlippageExceeded):
        plan_remove_liquidity(pool, "alice", 1000, 501, 0)
    with pytest.raises(InvalidInput):
        plan_remove_liquidity(pool, "alice", 0, 0, 0)

    locked = PoolRecord(key=derive_key("tokenA", "tokenB"))
    apply_deposit(locked, plan_add_liquidity(locked, 1000, 4000, 0, 0, minimum_liquidity=1000), "alice")
    with pytest.raises(InvalidInput, match="locked claims"):
        plan_remove_liquidity(locked, LOCKED_CLAIMS_HOLDER, 1000, 0, 0)


def test_full_withdrawal_drains_pool() -> None:
    pool = _funded_pool(1000, 4000)
    plan = plan_remove_liquidity(pool, "alice", 2000, 1000, 4000)
    apply_withdrawal(pool, plan, "alice")
    assert pool.reserves == (0, 0)
    assert pool.total_claims == 0
    assert len(pool.claims) == 0
    assert pool.check_invariants() == []


def test_swap_plan_uses_slot_of_asset_in() -> None:
    pool = _funded_pool(10_000, 20_000)
    fee = (0, 1000)

    b_for_a = plan_swap_exact_in(pool, "tokenA", "tokenB", 1000, 0, fee)
    assert b_for_a.amount_out == 1000 * 20_000 // 11_000
    a_for_b = plan_swap_exact_in(pool, "tokenB", "tokenA", 1000, 0, fee)
    assert a_for_b.amount_out == 1000 * 10_000 // 21_000

    apply_swap(pool, a_for_b)
    assert pool.reserves == (10_000 - a_for_b.amount_out, 21_000)


def test_swap_plan_guards() -> None:
    pool = _funded_pool(10_000, 10_000)
    fee = (0, 1000)
    with pytest.raises(SlippageExceeded):
        plan_swap_exact_in(pool, "tokenA", "tokenB", 1000, 910, fee)
    assert plan_swap_exact_in(pool, "tokenA", "tokenB", 1000, 909, fee).amount_out == 909
    with pytest.raises(ZeroLiquidity):
        plan_swap_exact_in(pool, "tokenA", "tokenB", 1, 0, fee)
    with pytest.raises(InvalidPair):
        plan_swap_exact_in(pool, "tokenA", "tokenA", 1000, 0, fee)
    with pytest.raises(InvalidPair):
        plan_swap_exact_in(pool, "tokenA", "tokenC", 1000, 0, fee)
    with pytest.raises(SlippageExceeded):
        plan_swap_exact_out(pool, "tokenA", "tokenB", 909, 999, fee)
    assert plan_swap_exact_out(pool, "tokenA", "tokenB", 909, 1000, fee).amount_in == 1000
