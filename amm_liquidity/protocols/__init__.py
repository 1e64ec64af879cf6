"""Protocol implementations for different AMM platforms"""

from .base import YieldStrategy

__all__ = ["YieldStrategy"]
