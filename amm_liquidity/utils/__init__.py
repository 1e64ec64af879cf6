"""Checked arithmetic, gas, transaction and saga utilities"""

from .safe_int import S, SafeUint, UINT256_MAX
from .saga import TransactionSaga
from .transactions import TransactionBuilder

__all__ = ["S", "SafeUint", "UINT256_MAX", "TransactionSaga", "TransactionBuilder"]
