"""
Core pool algorithms
"""

from .config import PoolConfig
from .engine import AddLiquidityResult, PairPoolEngine, RemoveLiquidityResult, SwapResult
from .liquidity import (
    LOCKED_CLAIMS_HOLDER,
    DepositPlan,
    WithdrawalPlan,
    plan_add_liquidity,
    plan_remove_liquidity,
)
from .pricing import (
    integer_sqrt,
    quote_input,
    quote_matching_deposit,
    quote_output,
    spot_price,
)
from .swap import SwapPlan, plan_swap_exact_in, plan_swap_exact_out
from .transfer import AssetTransfer, LedgerTransfer

__all__ = [
    "PoolConfig",
    "AddLiquidityResult",
    "PairPoolEngine",
    "RemoveLiquidityResult",
    "SwapResult",
    "LOCKED_CLAIMS_HOLDER",
    "DepositPlan",
    "WithdrawalPlan",
    "plan_add_liquidity",
    "plan_remove_liquidity",
    "integer_sqrt",
    "quote_input",
    "quote_matching_deposit",
    "quote_output",
    "spot_price",
    "SwapPlan",
    "plan_swap_exact_in",
    "plan_swap_exact_out",
    "AssetTransfer",
    "LedgerTransfer",
]
