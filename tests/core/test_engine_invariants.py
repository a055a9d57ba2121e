# [TESTER] v1

from __future__ import annotations

import random
import threading

import pytest

from pairpool import LedgerTransfer, PairPoolEngine, PoolConfig, PoolError
from pairpool.core.liquidity import LOCKED_CLAIMS_HOLDER

ASSETS = ("tokenA", "tokenB", "tokenC")
PARTIES = ("alice", "bob", "carol")
NOW = 1_700_000_000


def _check_ledger(engine: PairPoolEngine) -> None:
    transfer = engine.transfer
    for pool in engine.registry:
        assert pool.check_invariants() == []
        assert sum(balance for _, balance in pool.claims) == pool.total_claims
    for asset in ASSETS:
        held = sum(pool.get_reserve(asset) for pool in engine.registry if pool.key.contains(asset))
        assert transfer.custody_of(asset) == held


@pytest.mark.parametrize("seed,config", [(7, PoolConfig()), (11, PoolConfig.fee_free()), (23, PoolConfig(minimum_liquidity=1000))])
def test_random_operation_sequences_preserve_invariants(seed: int, config: PoolConfig) -> None:
    rng = random.Random(seed)
    transfer = LedgerTransfer()
    for party in PARTIES:
        for asset in ASSETS:
            transfer.credit(party, asset, 10**15)
    engine = PairPoolEngine(transfer, config, clock=lambda: NOW)

    for _ in range(400):
        x, y = rng.sample(ASSETS, 2)
        party = rng.choice(PARTIES)
        op = rng.random()
        k_before = None
        pool = engine.registry.get(engine._key(x, y))
        if pool is not None:
            k_before = pool.get_constant_product()
        try:
            if op < 0.35:
                engine.add_liquidity(
                    x, y, rng.randint(1, 10**7), rng.randint(1, 10**7), 0, 0, caller=party, deadline=NOW
                )
            elif op < 0.55:
                held = engine.claim_of(x, y, party)
                engine.remove_liquidity(x, y, rng.randint(1, max(held, 1)), 0, 0, caller=party, deadline=NOW)
            elif op < 0.9:
                engine.swap_exact_in(rng.randint(1, 10**6), 0, x, y, caller=party, deadline=NOW)
                assert pool.get_constant_product() >= k_before
            else:
                engine.swap_exact_out(rng.randint(1, 10**4), 10**12, x, y, caller=party, deadline=NOW)
                assert pool.get_constant_product() >= k_before
        except PoolError:
            pass
        _check_ledger(engine)

    if config.minimum_liquidity:
        for pool in engine.registry:
            if pool.total_claims:
                assert pool.claim_of(LOCKED_CLAIMS_HOLDER) == config.minimum_liquidity


def test_removing_every_claim_returns_reserves_to_holders() -> None:
    transfer = LedgerTransfer()
    for party in PARTIES:
        transfer.credit(party, "tokenA", 10**9)
        transfer.credit(party, "tokenB", 10**9)
    engine = PairPoolEngine(transfer, clock=lambda: NOW)

    engine.add_liquidity("tokenA", "tokenB", 10**6, 3 * 10**6, 0, 0, caller="alice", deadline=NOW)
    engine.add_liquidity("tokenA", "tokenB", 5 * 10**5, 10**7, 0, 0, caller="bob", deadline=NOW)
    engine.swap_exact_in(10**5, 0, "tokenB", "tokenA", caller="carol", deadline=NOW)

    for party in ("alice", "bob"):
        engine.remove_liquidity(
            "tokenA", "tokenB", engine.claim_of("tokenA", "tokenB", party), 0, 0, caller=party, deadline=NOW
        )

    # The last holder takes everything that is left.
    assert engine.get_reserves("tokenA", "tokenB") == (0, 0)
    assert transfer.custody_of("tokenA") == transfer.custody_of("tokenB") == 0
    total_a = sum(transfer.balance_of(p, "tokenA") for p in PARTIES)
    assert total_a == 3 * 10**9


def test_concurrent_operations_on_one_pair_are_serialized() -> None:
    transfer = LedgerTransfer()
    for party in PARTIES:
        transfer.credit(party, "tokenA", 10**15)
        transfer.credit(party, "tokenB", 10**15)
    engine = PairPoolEngine(transfer, clock=lambda: NOW)
    engine.add_liquidity("tokenA", "tokenB", 10**9, 4 * 10**9, 0, 0, caller="alice", deadline=NOW)

    start = threading.Barrier(len(PARTIES))
    errors: list = []

    def worker(party: str, seed: int) -> None:
        rng = random.Random(seed)
        start.wait()
        try:
            for _ in range(200):
                op = rng.random()
                x, y = rng.sample(("tokenA", "tokenB"), 2)
                try:
                    if op < 0.3:
                        engine.add_liquidity(
                            x, y, rng.randint(1, 10**6), rng.randint(1, 10**6), 0, 0, caller=party, deadline=NOW
                        )
                    elif op < 0.5:
                        held = engine.claim_of(x, y, party)
                        if held:
                            engine.remove_liquidity(x, y, rng.randint(1, held), 0, 0, caller=party, deadline=NOW)
                    else:
                        engine.swap_exact_in(rng.randint(1, 10**6), 0, x, y, caller=party, deadline=NOW)
                except PoolError:
                    pass
        except Exception as exc:  # surfaced in the main thread
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(party, i)) for i, party in enumerate(PARTIES)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    _check_ledger(engine)
    pool = engine.pool("tokenA", "tokenB")
    assert pool.reserves == (transfer.custody_of("tokenA"), transfer.custody_of("tokenB"))
    for asset in ("tokenA", "tokenB"):
        held = sum(transfer.balance_of(party, asset) for party in PARTIES)
        assert held + transfer.custody_of(asset) == 3 * 10**15
