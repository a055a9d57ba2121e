"""
Pool state management for pair pools.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from .balances import Amount, AssetId, PartyId
from .claims import ClaimTable
from .pairs import PairKey


class PoolStatus(Enum):
    """Pool status enumeration."""
    UNINITIALIZED = "UNINITIALIZED"
    ACTIVE = "ACTIVE"


@dataclass
class PoolRecord:
    """
    Ledger record of one pair pool.

    Attributes:
        key: Canonical pair key (fixes which asset is A and which is B)
        reserve_a: Reserve of key.asset_a
        reserve_b: Reserve of key.asset_b
        total_claims: Total claims issued against the reserves
        claims: Per-party claim balances
        created_at: Clock value at which the record was created
    """
    key: PairKey
    reserve_a: Amount = 0
    reserve_b: Amount = 0
    total_claims: Amount = 0
    claims: ClaimTable = field(default_factory=ClaimTable)
    created_at: int = 0

    def __post_init__(self):
        if self.reserve_a < 0 or self.reserve_b < 0:
            raise ValueError(
                f"Reserves must be non-negative: ({self.reserve_a}, {self.reserve_b})"
            )
        if self.total_claims < 0:
            raise ValueError(f"Total claims must be non-negative: {self.total_claims}")

    @property
    def pair_id(self) -> str:
        return self.key.pair_id

    @property
    def status(self) -> PoolStatus:
        return PoolStatus.ACTIVE if self.total_claims > 0 else PoolStatus.UNINITIALIZED

    @property
    def reserves(self) -> Tuple[Amount, Amount]:
        return self.reserve_a, self.reserve_b

    def get_reserve(self, asset: AssetId) -> Amount:
        """
        Get reserve for a specific asset.

        Raises:
            InvalidPair: If asset is not in this pool
        """
        return self.reserves[self.key.slot_of(asset)]

    def get_constant_product(self) -> int:
        """Compute k = reserve_a * reserve_b."""
        return self.reserve_a * self.reserve_b

    def claim_of(self, party: PartyId) -> Amount:
        return self.claims.get(party)

    def check_invariants(self) -> List[str]:
        """
        Return the names of violated ledger invariants (empty when consistent).
        """
        violations: List[str] = []
        if self.reserve_a < 0 or self.reserve_b < 0 or self.total_claims < 0:
            violations.append("non_negative")
        empties = (self.reserve_a == 0, self.reserve_b == 0, self.total_claims == 0)
        if any(empties) and not all(empties):
            violations.append("all_or_nothing_funding")
        if self.claims.total() != self.total_claims:
            violations.append("claims_conservation")
        return violations

    def snapshot(self) -> "PoolRecord":
        """Independent copy used for rollback."""
        return PoolRecord(
            key=self.key,
            reserve_a=self.reserve_a,
            reserve_b=self.reserve_b,
            total_claims=self.total_claims,
            claims=self.claims.copy(),
            created_at=self.created_at,
        )

    def restore(self, snapshot: "PoolRecord") -> None:
        if snapshot.key != self.key:
            raise ValueError(f"snapshot belongs to {snapshot.key}, not {self.key}")
        self.reserve_a = snapshot.reserve_a
        self.reserve_b = snapshot.reserve_b
        self.total_claims = snapshot.total_claims
        self.claims = snapshot.claims.copy()

    def __repr__(self) -> str:
        return (
            f"PoolRecord(pair={self.key}, "
            f"reserves=({self.reserve_a}, {self.reserve_b}), "
            f"total_claims={self.total_claims}, holders={len(self.claims)})"
        )


class PoolRegistry:
    """
    All pool records of one engine, keyed by canonical pair key.

    Each pair has its own re-entrant lock; the registry lock only guards
    record and lock creation.
    """

    def __init__(self) -> None:
        self._pools: Dict[PairKey, PoolRecord] = {}
        self._locks: Dict[PairKey, threading.RLock] = {}
        self._lock = threading.Lock()

    def get(self, key: PairKey) -> Optional[PoolRecord]:
        return self._pools.get(key)

    def get_or_create(self, key: PairKey, created_at: int = 0) -> Tuple[PoolRecord, bool]:
        """Return ``(record, created)``; the pair's A/B assignment is fixed here."""
        with self._lock:
            record = self._pools.get(key)
            if record is not None:
                return record, False
            record = PoolRecord(key=key, created_at=created_at)
            self._pools[key] = record
            return record, True

    def discard(self, key: PairKey) -> None:
        """Drop a record created by a call that then failed."""
        with self._lock:
            self._pools.pop(key, None)

    def lock_for(self, key: PairKey) -> threading.RLock:
        with self._lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    def keys(self) -> List[PairKey]:
        with self._lock:
            return sorted(self._pools)

    def keys_for_asset(self, asset: AssetId) -> List[PairKey]:
        return [key for key in self.keys() if key.contains(asset)]

    def __contains__(self, key: object) -> bool:
        return key in self._pools

    def __iter__(self) -> Iterator[PoolRecord]:
        return iter([self._pools[key] for key in self.keys()])

    def __len__(self) -> int:
        return len(self._pools)

    def __repr__(self) -> str:
        return f"PoolRegistry({len(self._pools)} pools)"
