"""Uniswap V1 contract wrappers"""

from .exchange import Exchange
from .factory import ExchangeFactory

__all__ = ["Exchange", "ExchangeFactory"]
