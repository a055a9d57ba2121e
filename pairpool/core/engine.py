"""
Pair pool engine: the imperative shell around the pure pool core.

Every mutating call follows the same phases, under the pair's lock:

1. validate (deadline, pair, amounts) and plan with the pure functions in
   `liquidity` / `swap`;
2. pull inbound assets from the caller;
3. mutate the `PoolRecord` and verify its invariants;
4. push outbound assets to the recipient.

A failure in phase 2 refunds whatever was already pulled. A failure in phase
3 or on the first outbound push restores the pre-call snapshot (and refunds
inbound assets). Nothing is retried.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from structlog import get_logger

from ..errors import (
    Expired,
    InvalidInput,
    InvalidPair,
    InvariantViolation,
    PairNotFound,
    PoolError,
    TransferFailure,
)
from ..state.balances import Amount, AssetId, PartyId
from ..state.pairs import PairKey, derive_key
from ..state.pools import PoolRecord, PoolRegistry, PoolStatus
from . import pricing
from .config import PoolConfig
from .liquidity import (
    LOCKED_CLAIMS_HOLDER,
    apply_deposit,
    apply_withdrawal,
    plan_add_liquidity,
    plan_remove_liquidity,
)
from .swap import SwapPlan, apply_swap, plan_swap_exact_in, plan_swap_exact_out
from .transfer import AssetTransfer

logger = get_logger()

Clock = Callable[[], int]
Move = Tuple[AssetId, Amount]


def system_clock() -> int:
    return int(time.time())


@dataclass(frozen=True)
class AddLiquidityResult:
    """Amounts are in the caller's ``(asset_x, asset_y)`` order."""

    pair_id: str
    amount_x: Amount
    amount_y: Amount
    liquidity_minted: Amount

    def __iter__(self) -> Iterator[Amount]:
        return iter((self.amount_x, self.amount_y, self.liquidity_minted))


@dataclass(frozen=True)
class RemoveLiquidityResult:
    """Amounts are in the caller's ``(asset_x, asset_y)`` order."""

    pair_id: str
    amount_x: Amount
    amount_y: Amount
    liquidity_burned: Amount

    def __iter__(self) -> Iterator[Amount]:
        return iter((self.amount_x, self.amount_y))


@dataclass(frozen=True)
class SwapResult:
    pair_id: str
    asset_in: AssetId
    asset_out: AssetId
    amount_in: Amount
    amount_out: Amount
    fee_amount: Amount


class PairPoolEngine:
    """
    Multi-pair constant-product pool engine.

    Args:
        transfer: Custody collaborator used for every inbound/outbound move
        config: Fee, price scale and minimum-liquidity settings
        clock: Returns the current time in the unit deadlines are given in
        registry: Pool records (a fresh empty registry by default)
    """

    def __init__(
        self,
        transfer: AssetTransfer,
        config: Optional[PoolConfig] = None,
        *,
        clock: Optional[Clock] = None,
        registry: Optional[PoolRegistry] = None,
    ) -> None:
        self.log = logger.new()
        self.transfer = transfer
        self.config = config if config is not None else PoolConfig()
        self.clock = clock if clock is not None else system_clock
        self.registry = registry if registry is not None else PoolRegistry()

    # ------------------------------------------------------------------
    # Liquidity
    # ------------------------------------------------------------------

    def add_liquidity(
        self,
        asset_x: AssetId,
        asset_y: AssetId,
        amount_x_desired: Amount,
        amount_y_desired: Amount,
        amount_x_min: Amount,
        amount_y_min: Amount,
        *,
        caller: PartyId,
        recipient: Optional[PartyId] = None,
        deadline: int,
    ) -> AddLiquidityResult:
        """
        Deposit both assets of a pair and mint claims to ``recipient``.

        The pool is created on the first successful deposit. An empty pool
        (including one drained back to zero claims) takes the desired amounts
        as given; a funded pool takes the largest ratio-preserving deposit not
        exceeding either desired amount.
        """
        now = self._check_deadline(deadline)
        key = self._key(asset_x, asset_y)
        self._require_party("caller", caller)
        recipient = caller if recipient is None else recipient
        self._require_party("recipient", recipient)
        a_desired, b_desired = key.orient(asset_x, amount_x_desired, amount_y_desired)
        a_min, b_min = key.orient(asset_x, amount_x_min, amount_y_min)

        with self.registry.lock_for(key):
            pool, created = self.registry.get_or_create(key, created_at=now)
            try:
                plan = plan_add_liquidity(
                    pool,
                    a_desired,
                    b_desired,
                    a_min,
                    b_min,
                    minimum_liquidity=self.config.minimum_liquidity,
                )
                moves = [(key.asset_a, plan.amount_a), (key.asset_b, plan.amount_b)]
                self._pull_all(caller, moves)
                try:
                    self._apply_verified(pool, lambda: apply_deposit(pool, plan, recipient))
                except InvariantViolation:
                    self._refund(caller, moves)
                    raise
            except Exception:
                if created:
                    self.registry.discard(key)
                raise

            if plan.bootstrap:
                self.log.info(
                    'pool bootstrapped',
                    pair=str(key),
                    pair_id=key.pair_id,
                    reserve_a=pool.reserve_a,
                    reserve_b=pool.reserve_b,
                    locked=plan.liquidity_locked,
                )
            self.log.info(
                'liquidity added',
                pair=str(key),
                caller=caller,
                recipient=recipient,
                amount_a=plan.amount_a,
                amount_b=plan.amount_b,
                minted=plan.liquidity_minted,
                total_claims=pool.total_claims,
            )

        amount_x, amount_y = key.orient(asset_x, plan.amount_a, plan.amount_b)
        return AddLiquidityResult(
            pair_id=key.pair_id,
            amount_x=amount_x,
            amount_y=amount_y,
            liquidity_minted=plan.liquidity_minted,
        )

    def remove_liquidity(
        self,
        asset_x: AssetId,
        asset_y: AssetId,
        liquidity: Amount,
        amount_x_min: Amount,
        amount_y_min: Amount,
        *,
        caller: PartyId,
        recipient: Optional[PartyId] = None,
        deadline: int,
    ) -> RemoveLiquidityResult:
        """Burn ``liquidity`` of the caller's claims and pay the share of both reserves to ``recipient``."""
        self._check_deadline(deadline)
        key = self._key(asset_x, asset_y)
        self._require_party("caller", caller)
        recipient = caller if recipient is None else recipient
        self._require_party("recipient", recipient)
        a_min, b_min = key.orient(asset_x, amount_x_min, amount_y_min)

        with self.registry.lock_for(key):
            pool = self._funded(key)
            plan = plan_remove_liquidity(pool, caller, liquidity, a_min, b_min)
            snapshot = self._apply_verified(pool, lambda: apply_withdrawal(pool, plan, caller))
            self._push_all(
                recipient,
                [(key.asset_a, plan.amount_a), (key.asset_b, plan.amount_b)],
                pool=pool,
                snapshot=snapshot,
            )
            self.log.info(
                'liquidity removed',
                pair=str(key),
                caller=caller,
                recipient=recipient,
                amount_a=plan.amount_a,
                amount_b=plan.amount_b,
                burned=plan.liquidity,
                total_claims=pool.total_claims,
            )

        amount_x, amount_y = key.orient(asset_x, plan.amount_a, plan.amount_b)
        return RemoveLiquidityResult(
            pair_id=key.pair_id,
            amount_x=amount_x,
            amount_y=amount_y,
            liquidity_burned=plan.liquidity,
        )

    # ------------------------------------------------------------------
    # Swaps
    # ------------------------------------------------------------------

    def swap_exact_in(
        self,
        amount_in: Amount,
        amount_out_min: Amount,
        asset_in: AssetId,
        asset_out: AssetId,
        *,
        caller: PartyId,
        recipient: Optional[PartyId] = None,
        deadline: int,
    ) -> SwapResult:
        """Sell exactly ``amount_in`` of ``asset_in`` for at least ``amount_out_min`` of ``asset_out``."""
        self._check_deadline(deadline)
        key = self._key(asset_in, asset_out)
        self._require_party("caller", caller)
        recipient = caller if recipient is None else recipient
        self._require_party("recipient", recipient)

        with self.registry.lock_for(key):
            pool = self._funded(key)
            plan = plan_swap_exact_in(pool, asset_in, asset_out, amount_in, amount_out_min, self.config.fee)
            self._execute_swap(pool, plan, caller, recipient)
        return self._swap_result(key, plan)

    def swap_exact_out(
        self,
        amount_out: Amount,
        amount_in_max: Amount,
        asset_in: AssetId,
        asset_out: AssetId,
        *,
        caller: PartyId,
        recipient: Optional[PartyId] = None,
        deadline: int,
    ) -> SwapResult:
        """Buy exactly ``amount_out`` of ``asset_out`` paying at most ``amount_in_max`` of ``asset_in``."""
        self._check_deadline(deadline)
        key = self._key(asset_in, asset_out)
        self._require_party("caller", caller)
        recipient = caller if recipient is None else recipient
        self._require_party("recipient", recipient)

        with self.registry.lock_for(key):
            pool = self._funded(key)
            plan = plan_swap_exact_out(pool, asset_in, asset_out, amount_out, amount_in_max, self.config.fee)
            self._execute_swap(pool, plan, caller, recipient)
        return self._swap_result(key, plan)

    def _execute_swap(self, pool: PoolRecord, plan: SwapPlan, caller: PartyId, recipient: PartyId) -> None:
        inbound = [(plan.asset_in, plan.amount_in)]
        self._pull_all(caller, inbound)
        try:
            snapshot = self._apply_verified(pool, lambda: apply_swap(pool, plan), k_floor=plan.k_before)
            self._push_all(recipient, [(plan.asset_out, plan.amount_out)], pool=pool, snapshot=snapshot)
        except PoolError:
            self._refund(caller, inbound)
            raise
        self.log.info(
            'swap executed',
            pair=str(pool.key),
            caller=caller,
            recipient=recipient,
            asset_in=plan.asset_in,
            amount_in=plan.amount_in,
            asset_out=plan.asset_out,
            amount_out=plan.amount_out,
            fee=plan.fee_amount,
        )

    @staticmethod
    def _swap_result(key: PairKey, plan: SwapPlan) -> SwapResult:
        return SwapResult(
            pair_id=key.pair_id,
            asset_in=plan.asset_in,
            asset_out=plan.asset_out,
            amount_in=plan.amount_in,
            amount_out=plan.amount_out,
            fee_amount=plan.fee_amount,
        )

    # ------------------------------------------------------------------
    # Queries (never create records)
    # ------------------------------------------------------------------

    def quote_output(self, asset_in: AssetId, asset_out: AssetId, amount_in: Amount) -> Amount:
        key = self._key(asset_in, asset_out)
        with self.registry.lock_for(key):
            pool = self._funded(key)
            reserve_in, reserve_out = key.orient(asset_in, *pool.reserves)
            return pricing.quote_output(amount_in, reserve_in, reserve_out, *self.config.fee)

    def quote_input(self, asset_in: AssetId, asset_out: AssetId, amount_out: Amount) -> Amount:
        key = self._key(asset_in, asset_out)
        with self.registry.lock_for(key):
            pool = self._funded(key)
            reserve_in, reserve_out = key.orient(asset_in, *pool.reserves)
            return pricing.quote_input(amount_out, reserve_in, reserve_out, *self.config.fee)

    def spot_price(self, asset_base: AssetId, asset_quote: AssetId) -> int:
        """Units of ``asset_quote`` per unit of ``asset_base``, scaled by ``config.price_scale``."""
        key = self._key(asset_base, asset_quote)
        with self.registry.lock_for(key):
            pool = self.registry.get(key)
            reserve_base, reserve_quote = key.orient(asset_base, *pool.reserves) if pool else (0, 0)
            return pricing.spot_price(reserve_base, reserve_quote, self.config.price_scale)

    def get_reserves(self, asset_x: AssetId, asset_y: AssetId) -> Tuple[Amount, Amount]:
        """Reserves in caller order; ``(0, 0)`` for an unknown pair."""
        key = self._key(asset_x, asset_y)
        with self.registry.lock_for(key):
            pool = self.registry.get(key)
            if pool is None:
                return 0, 0
            return key.orient(asset_x, *pool.reserves)

    def claim_of(self, asset_x: AssetId, asset_y: AssetId, party: PartyId) -> Amount:
        key = self._key(asset_x, asset_y)
        with self.registry.lock_for(key):
            pool = self.registry.get(key)
            return pool.claim_of(party) if pool is not None else 0

    def total_claims(self, asset_x: AssetId, asset_y: AssetId) -> Amount:
        key = self._key(asset_x, asset_y)
        with self.registry.lock_for(key):
            pool = self.registry.get(key)
            return pool.total_claims if pool is not None else 0

    def status(self, asset_x: AssetId, asset_y: AssetId) -> PoolStatus:
        key = self._key(asset_x, asset_y)
        with self.registry.lock_for(key):
            pool = self.registry.get(key)
            return pool.status if pool is not None else PoolStatus.UNINITIALIZED

    def pool(self, asset_x: AssetId, asset_y: AssetId) -> Optional[PoolRecord]:
        """A detached copy of the pair's record, or None."""
        key = self._key(asset_x, asset_y)
        with self.registry.lock_for(key):
            pool = self.registry.get(key)
            return pool.snapshot() if pool is not None else None

    def pairs(self) -> List[PairKey]:
        return self.registry.keys()

    def pairs_for_asset(self, asset: AssetId) -> List[PairKey]:
        return self.registry.keys_for_asset(asset)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_deadline(self, deadline: int) -> int:
        if not isinstance(deadline, int) or isinstance(deadline, bool):
            raise InvalidInput(f"deadline must be an int, got {type(deadline).__name__}")
        now = self.clock()
        if now > deadline:
            raise Expired(deadline, now)
        return now

    @staticmethod
    def _key(asset_x: AssetId, asset_y: AssetId) -> PairKey:
        for name, v in (("asset_x", asset_x), ("asset_y", asset_y)):
            if not isinstance(v, str) or not v:
                raise InvalidInput(f"{name} must be a non-empty str")
        if asset_x == asset_y:
            raise InvalidPair(f"a pair needs two distinct assets, got {asset_x!r} twice")
        return derive_key(asset_x, asset_y)

    @staticmethod
    def _require_party(name: str, party: PartyId) -> None:
        if not isinstance(party, str) or not party:
            raise InvalidInput(f"{name} must be a non-empty str")
        if party == LOCKED_CLAIMS_HOLDER:
            raise InvalidInput(f"{name} cannot be the reserved locked-claims holder")

    def _funded(self, key: PairKey) -> PoolRecord:
        pool = self.registry.get(key)
        if pool is None or pool.total_claims == 0:
            raise PairNotFound(f"no funded pool for {key}")
        return pool

    def _apply_verified(
        self,
        pool: PoolRecord,
        mutate: Callable[[], None],
        *,
        k_floor: Optional[int] = None,
    ) -> PoolRecord:
        """Apply ``mutate`` to ``pool``; restore and raise if an invariant breaks. Returns the pre-state."""
        snapshot = pool.snapshot()
        mutate()
        violations = pool.check_invariants()
        if k_floor is not None and pool.get_constant_product() < k_floor:
            violations.append("constant_product")
        if violations:
            pool.restore(snapshot)
            self.log.error('invariant violation, mutation rolled back', pair=str(pool.key), violations=violations)
            raise InvariantViolation(violations)
        return snapshot

    def _pull(self, asset: AssetId, party: PartyId, amount: Amount) -> None:
        try:
            self.transfer.pull(asset, party, amount)
        except TransferFailure:
            raise
        except Exception as exc:
            raise TransferFailure(f"pull of {amount} {asset} from {party!r} failed: {exc}") from exc

    def _push(self, asset: AssetId, party: PartyId, amount: Amount) -> None:
        try:
            self.transfer.push(asset, party, amount)
        except TransferFailure:
            raise
        except Exception as exc:
            raise TransferFailure(f"push of {amount} {asset} to {party!r} failed: {exc}") from exc

    def _pull_all(self, party: PartyId, moves: Sequence[Move]) -> None:
        """Pull every move from ``party`` or none of them."""
        pulled: List[Move] = []
        for asset, amount in moves:
            if amount == 0:
                continue
            try:
                self._pull(asset, party, amount)
            except TransferFailure:
                if pulled:
                    self.log.warning('inbound transfer failed, refunding', party=party, asset=asset, amount=amount)
                    self._refund(party, pulled)
                raise
            pulled.append((asset, amount))

    def _refund(self, party: PartyId, moves: Sequence[Move]) -> None:
        for i, (asset, amount) in enumerate(moves):
            if amount == 0:
                continue
            try:
                self._push(asset, party, amount)
            except TransferFailure as exc:
                undelivered = [(a, party, amt) for a, amt in moves[i:] if amt]
                self.log.error('refund failed', party=party, undelivered=undelivered)
                raise TransferFailure(f"refund to {party!r} failed: {exc}", undelivered=undelivered) from exc

    def _push_all(self, party: PartyId, moves: Sequence[Move], *, pool: PoolRecord, snapshot: PoolRecord) -> None:
        """
        Push every move to ``party``.

        If nothing was delivered yet the ledger is restored to ``snapshot``.
        Once something was delivered the ledger stays committed: custody then
        exceeds reserves, and the undelivered moves are reported.
        """
        delivered = False
        for i, (asset, amount) in enumerate(moves):
            if amount == 0:
                continue
            try:
                self._push(asset, party, amount)
            except TransferFailure as exc:
                if not delivered:
                    pool.restore(snapshot)
                    self.log.warning('outbound transfer failed, ledger rolled back', pair=str(pool.key), party=party)
                    raise
                undelivered = [(a, party, amt) for a, amt in moves[i:] if amt]
                self.log.error('partial payout', pair=str(pool.key), party=party, undelivered=undelivered)
                raise TransferFailure(f"partial payout to {party!r}: {exc}", undelivered=undelivered) from exc
            delivered = True
