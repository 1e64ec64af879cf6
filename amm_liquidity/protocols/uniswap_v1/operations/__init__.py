"""Uniswap V1 operations"""

from .liquidity import LiquidityManager

__all__ = ["LiquidityManager"]
