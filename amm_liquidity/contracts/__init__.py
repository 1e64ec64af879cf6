"""Contract wrappers for ERC20 tokens and the custody wallet"""

from .erc20 import ERC20
from .wallet import SmartWallet

__all__ = ["ERC20", "SmartWallet"]
