"""Core module - configuration, connection, exceptions, and shared queries"""

from .config import Config
from .connection import Web3Manager
from .exceptions import AMMError, ConfigError, ConnectionError, TransactionError
from .balances import BalanceQuery

__all__ = [
    "Config",
    "Web3Manager",
    "AMMError",
    "ConfigError",
    "ConnectionError",
    "TransactionError",
    "BalanceQuery",
]
