"""
Two-token constant-product liquidity pools.
"""

from .core import (
    AddLiquidityResult,
    LedgerTransfer,
    PairPoolEngine,
    PoolConfig,
    RemoveLiquidityResult,
    SwapResult,
)
from .errors import (
    EmptyReserve,
    Expired,
    InsufficientClaim,
    InvalidInput,
    InvalidPair,
    InvariantViolation,
    PairNotFound,
    PoolError,
    SlippageExceeded,
    TransferFailure,
    ZeroLiquidity,
)
from .state import PairKey, PoolRecord, PoolStatus, canonical_order, derive_key

__version__ = "0.1.0"

__all__ = [
    "AddLiquidityResult",
    "LedgerTransfer",
    "PairPoolEngine",
    "PoolConfig",
    "RemoveLiquidityResult",
    "SwapResult",
    "EmptyReserve",
    "Expired",
    "InsufficientClaim",
    "InvalidInput",
    "InvalidPair",
    "InvariantViolation",
    "PairNotFound",
    "PoolError",
    "SlippageExceeded",
    "TransferFailure",
    "ZeroLiquidity",
    "PairKey",
    "PoolRecord",
    "PoolStatus",
    "canonical_order",
    "derive_key",
]
