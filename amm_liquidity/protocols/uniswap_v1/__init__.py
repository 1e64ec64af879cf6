"""Uniswap V1 protocol implementation (ETH/token constant-product pools)"""

from .config import UniswapV1Config
from .contracts.exchange import Exchange
from .contracts.factory import ExchangeFactory
from .math import (
    DepositPlan,
    Reserves,
    SwapPlan,
    get_input_price,
    plan_deposit,
    plan_rebalance,
    withdrawal_amount,
)
from .operations.liquidity import LiquidityManager

__all__ = [
    "UniswapV1Config",
    "Exchange",
    "ExchangeFactory",
    "DepositPlan",
    "Reserves",
    "SwapPlan",
    "get_input_price",
    "plan_deposit",
    "plan_rebalance",
    "withdrawal_amount",
    "LiquidityManager",
]
