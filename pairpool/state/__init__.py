"""
Ledger state for pair pools
"""

from .balances import AssetId, Amount, CustodyLedger, PartyId
from .claims import ClaimTable
from .pairs import PairKey, canonical_order, compute_pair_id, derive_key
from .pools import PoolRecord, PoolRegistry, PoolStatus

__all__ = [
    "AssetId",
    "Amount",
    "CustodyLedger",
    "PartyId",
    "ClaimTable",
    "PairKey",
    "canonical_order",
    "compute_pair_id",
    "derive_key",
    "PoolRecord",
    "PoolRegistry",
    "PoolStatus",
]
