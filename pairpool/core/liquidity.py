"""
Liquidity management: plan and apply deposits and withdrawals.

Planning is pure (reads a `PoolRecord`, returns a frozen plan); applying
mutates the record in place. The engine performs custody transfers between
the two steps. All amounts here are in canonical (A, B) slot order.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import InsufficientClaim, InvalidInput, SlippageExceeded, ZeroLiquidity
from ..kernels.python.lp_math import deposit_claims, withdrawal_amounts
from ..state.balances import Amount, PartyId
from ..state.pools import PoolRecord
from .pricing import require_amount

# Holder of the claims locked by `PoolConfig.minimum_liquidity`.
LOCKED_CLAIMS_HOLDER: PartyId = "0x" + "00" * 20


@dataclass(frozen=True)
class DepositPlan:
    amount_a: Amount
    amount_b: Amount
    liquidity_minted: Amount
    liquidity_locked: Amount
    bootstrap: bool


@dataclass(frozen=True)
class WithdrawalPlan:
    liquidity: Amount
    amount_a: Amount
    amount_b: Amount


def plan_add_liquidity(
    pool: PoolRecord,
    amount_a_desired: Amount,
    amount_b_desired: Amount,
    amount_a_min: Amount,
    amount_b_min: Amount,
    *,
    minimum_liquidity: int = 0,
) -> DepositPlan:
    """
    Compute the actual deposit and the claims it mints.

    Bootstrap (``total_claims == 0``, including a drained pool):
        amounts = desired amounts (the depositor sets the price)
        liquidity = isqrt(amount_a * amount_b) - minimum_liquidity

    Funded pool:
        amount_b = amount_a_desired * reserve_b // reserve_a, if <= amount_b_desired
        otherwise amount_a = amount_b_desired * reserve_a // reserve_b
        liquidity = min(amount_a * T // reserve_a, amount_b * T // reserve_b)

    Raises:
        InvalidInput: non-positive desired amounts, negative minimums
        SlippageExceeded: a used amount is below its minimum
        ZeroLiquidity: the deposit would mint no claims
    """
    require_amount("amount_a_desired", amount_a_desired, positive=True)
    require_amount("amount_b_desired", amount_b_desired, positive=True)
    require_amount("amount_a_min", amount_a_min)
    require_amount("amount_b_min", amount_b_min)

    bootstrap = pool.total_claims == 0
    if bootstrap and (pool.reserve_a != 0 or pool.reserve_b != 0):
        raise InvalidInput(f"pool {pool.key} has reserves but no claims")

    try:
        res = deposit_claims(
            reserve_a=pool.reserve_a,
            reserve_b=pool.reserve_b,
            total_claims=pool.total_claims,
            desired_a=amount_a_desired,
            desired_b=amount_b_desired,
            locked=minimum_liquidity if bootstrap else 0,
        )
    except ValueError as exc:
        raise InvalidInput(str(exc)) from exc

    if res.amount_a < amount_a_min:
        raise SlippageExceeded(f"amount of {pool.key.asset_a} below minimum", res.amount_a, amount_a_min)
    if res.amount_b < amount_b_min:
        raise SlippageExceeded(f"amount of {pool.key.asset_b} below minimum", res.amount_b, amount_b_min)
    if res.amount_a <= 0 or res.amount_b <= 0:
        raise ZeroLiquidity(f"deposit too small for the current ratio of {pool.key}")
    if res.claims_minted <= 0:
        raise ZeroLiquidity(f"deposit into {pool.key} would mint no claims")

    return DepositPlan(
        amount_a=res.amount_a,
        amount_b=res.amount_b,
        liquidity_minted=res.claims_minted,
        liquidity_locked=res.claims_locked,
        bootstrap=bootstrap,
    )


def apply_deposit(pool: PoolRecord, plan: DepositPlan, recipient: PartyId) -> None:
    """Credit reserves, total claims and the recipient's (and lock holder's) balance."""
    pool.reserve_a += plan.amount_a
    pool.reserve_b += plan.amount_b
    pool.total_claims += plan.liquidity_minted + plan.liquidity_locked
    if plan.liquidity_locked:
        pool.claims.add(LOCKED_CLAIMS_HOLDER, plan.liquidity_locked)
    pool.claims.add(recipient, plan.liquidity_minted)


def plan_remove_liquidity(
    pool: PoolRecord,
    party: PartyId,
    liquidity: Amount,
    amount_a_min: Amount,
    amount_b_min: Amount,
) -> WithdrawalPlan:
    """
    Compute the assets released by burning ``liquidity`` of ``party``'s claims.

    Outputs:
        amount_a = liquidity * reserve_a // total_claims
        amount_b = liquidity * reserve_b // total_claims

    Raises:
        InvalidInput: non-positive liquidity, negative minimums, or ``party`` is
            the locked-claims holder
        InsufficientClaim: party holds fewer claims than requested
        SlippageExceeded: an output is below its minimum
        ZeroLiquidity: both outputs round down to zero
    """
    require_amount("liquidity", liquidity, positive=True)
    require_amount("amount_a_min", amount_a_min)
    require_amount("amount_b_min", amount_b_min)

    if party == LOCKED_CLAIMS_HOLDER:
        raise InvalidInput("locked claims can never be burned")
    held = pool.claims.get(party)
    if held < liquidity:
        raise InsufficientClaim(party, held, liquidity)

    try:
        res = withdrawal_amounts(
            claims=liquidity,
            reserve_a=pool.reserve_a,
            reserve_b=pool.reserve_b,
            total_claims=pool.total_claims,
        )
    except ValueError as exc:
        raise InvalidInput(str(exc)) from exc

    if res.amount_a < amount_a_min:
        raise SlippageExceeded(f"amount of {pool.key.asset_a} below minimum", res.amount_a, amount_a_min)
    if res.amount_b < amount_b_min:
        raise SlippageExceeded(f"amount of {pool.key.asset_b} below minimum", res.amount_b, amount_b_min)
    if res.amount_a == 0 and res.amount_b == 0:
        raise ZeroLiquidity(f"burning {liquidity} claims of {pool.key} returns nothing")

    return WithdrawalPlan(liquidity=liquidity, amount_a=res.amount_a, amount_b=res.amount_b)


def apply_withdrawal(pool: PoolRecord, plan: WithdrawalPlan, party: PartyId) -> None:
    """Burn the party's claims and release the matching reserves."""
    pool.claims.subtract(party, plan.liquidity)
    pool.total_claims -= plan.liquidity
    pool.reserve_a -= plan.amount_a
    pool.reserve_b -= plan.amount_b
