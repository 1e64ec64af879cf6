"""Interfaces shared by liquidity-pool backends"""

from typing import Any, Dict, Protocol, Sequence, runtime_checkable


@runtime_checkable
class YieldStrategy(Protocol):
    """
    Contract every pool backend offers to hold funds in a pool.

    Backends satisfy it structurally; no base class is required.
    """

    def open_position(
        self, tokens: Sequence[str], amounts: Sequence[int], prevent_swap: bool = False
    ) -> Dict[str, Any]:
        """
        Deposit a two-asset pair into the pool.

        Args:
            tokens: The two assets (one must be the reference asset)
            amounts: Amounts offered, in the same order as tokens
            prevent_swap: Deposit at the pool ratio without rebalancing

        Returns:
            Dict with the executed plan and amounts deposited
        """
        ...

    def close_position(self, tokens: Sequence[str], fraction_bps: int) -> Dict[str, Any]:
        """
        Withdraw fraction_bps / 10000 of the held pool shares.

        Returns:
            Dict with shares burned and call receipt
        """
        ...

    def get_position(self, token: str) -> Dict[str, Any]:
        """
        Pool shares held for token's pool and their underlying value.
        """
        ...
