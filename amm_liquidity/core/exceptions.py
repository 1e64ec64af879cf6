"""Custom exceptions for AMM Liquidity"""


class AMMError(Exception):
    """Base exception for all AMM errors"""
    pass


class ConfigError(AMMError):
    """Configuration-related errors"""
    pass


class ConnectionError(AMMError):
    """Web3 connection errors"""
    pass


class TransactionError(AMMError):
    """A collaborator call (approve, swap, deposit, withdraw) failed"""
    pass


class InvalidInputError(AMMError, ValueError):
    """Malformed request: wrong asset pair, bad amounts, mismatched lengths"""
    pass


class InvalidFractionError(InvalidInputError):
    """Withdrawal fraction outside [0, 10000] basis points"""
    pass


class InsufficientBalanceError(AMMError):
    """Insufficient token balance"""
    pass


class PoolError(AMMError):
    """Pool-related errors (not found, empty, drained)"""
    pass


class PoolNotFoundError(PoolError):
    """Registry has no pool for the requested token"""
    pass


class DegeneratePoolError(PoolError):
    """A pool reserve is zero, pricing is undefined"""
    pass


class InsufficientLiquidityError(PoolError):
    """Pool too shallow to produce a meaningful plan"""
    pass


class ArithmeticOverflowError(AMMError, ArithmeticError):
    """Intermediate value left the uint256 range"""
    pass
